"""Random player — plays one full turn for the side to move.

ランダムプレイヤー: 手番側の1手（移動・召喚・持ち駒の配置・成りの選択）を
ランダムに選んで指す。

用途:
- Web アプリ・CLI の対戦相手（後手）
- ルール実装の動作確認（ランダム同士で終局まで指せるか）
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace

from summon_shogi.game.moves import legal_targets
from summon_shogi.game.state import (
    Phase,
    SessionState,
    arm_captured,
    choose_promotion,
    request_summon,
    select_square,
)
from summon_shogi.game.summon import DEFAULT_SUMMON_CONFIG, SummonConfig
from summon_shogi.game.types import Square


@dataclass(frozen=True)
class RandomPlayerConfig:
    """Configuration for the random player."""

    summon_rate: float = 0.3    # 召喚を試みる確率
    captured_rate: float = 0.2  # 持ち駒があるとき、それを打つ確率
    promote_rate: float = 0.8   # 成りを選べるとき、成る確率


def board_moves(state: SessionState) -> list[tuple[Square, Square]]:
    """List every (from, to) board move available to the side to move."""
    moves: list[tuple[Square, Square]] = []
    for square, piece in state.board.occupied():
        if piece.owner != state.turn:
            continue
        for target in sorted(legal_targets(piece, square, state.board)):
            moves.append((square, target))
    return moves


def random_turn(
    state: SessionState,
    rng: random.Random,
    config: RandomPlayerConfig = RandomPlayerConfig(),
    summon_config: SummonConfig = DEFAULT_SUMMON_CONFIG,
) -> SessionState:
    """Play one complete turn and return the resulting state.

    終局局面で呼ばれた場合は ValueError を送出する。
    途中のフェーズ（配置待ち・成り待ち）から呼ばれた場合は、その手を完了させる。
    """
    if state.is_terminal:
        raise ValueError("Game is already over")

    if state.phase == Phase.PROMOTION_PENDING:
        return choose_promotion(state, rng.random() < config.promote_rate)
    if state.phase == Phase.PLACEMENT_ARMED:
        return _place_randomly(state, rng)
    if state.phase == Phase.PIECE_SELECTED:
        state = replace(state, phase=Phase.AWAITING_SELECTION, selected=None, highlights=frozenset())

    has_room = bool(state.board.empty_squares())
    pool = state.pool(state.turn)
    if pool and has_room and rng.random() < config.captured_rate:
        return _place_randomly(arm_captured(state, rng.randrange(len(pool))), rng)
    if has_room and rng.random() < config.summon_rate:
        armed = request_summon(state, rng, summon_config)
        if armed.phase == Phase.PLACEMENT_ARMED:
            return _place_randomly(armed, rng)

    moves = board_moves(state)
    if not moves:
        raise ValueError("No legal moves available")
    from_square, to_square = rng.choice(moves)
    state = select_square(select_square(state, from_square), to_square)
    if state.phase == Phase.PROMOTION_PENDING:
        state = choose_promotion(state, rng.random() < config.promote_rate)
    return state


def _place_randomly(state: SessionState, rng: random.Random) -> SessionState:
    target = rng.choice(sorted(state.highlights))
    return select_square(state, target)
