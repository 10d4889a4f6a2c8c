"""Session state and turn transitions for 召喚将棋.

召喚将棋の対局状態（セッション）と、入力ごとの状態遷移。

状態遷移はすべて純粋関数 `(state, 入力) -> 新しい state` として実装する。
受け付けられない入力（相手の駒を選ぶ、ハイライト外のマスに置く等）は
エラーにせず、元の state をそのまま返す。

フェーズ:
  AWAITING_SELECTION → 自分の駒を選ぶ        → PIECE_SELECTED
                     → 召喚/持ち駒を選ぶ     → PLACEMENT_ARMED
  PIECE_SELECTED     → ハイライトのマスへ移動 → (成りゾーンなら) PROMOTION_PENDING
  PLACEMENT_ARMED    → 空きマスに配置        → 手番交代
  PROMOTION_PENDING  → 成る/成らない         → 手番交代
  手番交代の直後に詰み判定を行い、詰みなら TERMINAL。
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NamedTuple

from summon_shogi.game.board import Board, Piece
from summon_shogi.game.checkmate import escape_squares, is_mated
from summon_shogi.game.errors import OutOfRangeError
from summon_shogi.game.moves import all_targets, legal_targets
from summon_shogi.game.summon import DEFAULT_SUMMON_CONFIG, SummonConfig, draw_summon
from summon_shogi.game.types import (
    KING_HOME,
    PROMOTION_MAP,
    PROMOTION_ZONE,
    PieceType,
    Player,
    Square,
)


class Phase(Enum):
    """Phases of the turn state machine."""

    AWAITING_SELECTION = "awaiting_selection"
    PIECE_SELECTED = "piece_selected"
    PLACEMENT_ARMED = "placement_armed"
    PROMOTION_PENDING = "promotion_pending"
    TERMINAL = "terminal"


# 召喚・持ち駒の準備ができるフェーズ（駒を選択中なら選択は解除される）
_ARMABLE_PHASES = (Phase.AWAITING_SELECTION, Phase.PIECE_SELECTED)


class VisualizationOverlay(NamedTuple):
    """可視化モードで表示するマスの集合。"""

    king_options: frozenset[Square]  # 手番側の玉が逃げられるマス
    all_options: frozenset[Square]   # 盤上すべての駒の利き


def _home_king_square() -> Square:
    return Square(*KING_HOME[Player.SENTE])


@dataclass(frozen=True)
class SessionState:
    """Immutable state of one Summon Shogi session.

    board:            盤面
    turn:             手番のプレイヤー
    phase:            状態機械のフェーズ
    armed:            配置待ちの駒種（召喚した駒、または持ち駒から選んだ駒）
    armed_from_pool:  armed が持ち駒から来たなら True
    highlights:       現在ハイライトされている移動先・配置先
    last_move:        最後に駒が動いた（置かれた）マス
    selected:         選択中の盤上の駒のマス
    promotion_square: 成り判定待ちの駒のマス
    pools:            持ち駒（pools[0]=先手が取った駒、pools[1]=後手が取った駒）
    winner:           勝者（対局中は None）
    visualization:    可視化モードの ON/OFF
    move_count:       手数
    """

    board: Board = field(default_factory=Board)
    turn: Player = Player.SENTE
    phase: Phase = Phase.AWAITING_SELECTION
    armed: PieceType | None = None
    armed_from_pool: bool = False
    highlights: frozenset[Square] = frozenset()
    last_move: Square | None = field(default_factory=_home_king_square)
    selected: Square | None = None
    promotion_square: Square | None = None
    pools: tuple[tuple[PieceType, ...], tuple[PieceType, ...]] = ((), ())
    winner: Player | None = None
    visualization: bool = False
    move_count: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.phase == Phase.TERMINAL

    def pool(self, player: Player) -> tuple[PieceType, ...]:
        """プレイヤーが取った駒の一覧（取った順）。"""
        return self.pools[player.value]


def new_session() -> SessionState:
    """Return a fresh session: both kings home, SENTE to move."""
    return SessionState()


def can_promote(piece: Piece, square: Square) -> bool:
    """Check whether a board move of piece onto square offers promotion.

    未成駒（金・玉を除く）が敵陣3段に入ったときだけ成りを選べる。
    召喚・持ち駒の配置では呼ばれない（配置した駒は成れない）。
    """
    return piece.piece_type in PROMOTION_MAP and square.row in PROMOTION_ZONE[piece.owner]


def select_square(state: SessionState, square: Square) -> SessionState:
    """Dispatch a tap on square according to the current phase."""
    if state.phase == Phase.PLACEMENT_ARMED:
        if square in state.highlights:
            return _place(state, square)
        return state

    if state.phase == Phase.PIECE_SELECTED:
        if square in state.highlights:
            return _move(state, square)
        piece = state.board.piece_at(square)
        if square != state.selected and piece is not None and piece.owner == state.turn:
            return _select(state, square)
        # 選択中のマスやハイライト外のマスをタップしたら選択解除
        return replace(
            state,
            phase=Phase.AWAITING_SELECTION,
            selected=None,
            highlights=frozenset(),
        )

    if state.phase == Phase.AWAITING_SELECTION:
        piece = state.board.piece_at(square)
        if piece is not None and piece.owner == state.turn:
            return _select(state, square)

    # PROMOTION_PENDING / TERMINAL / 相手の駒・空きマス
    return state


def request_summon(
    state: SessionState,
    rng: random.Random,
    config: SummonConfig = DEFAULT_SUMMON_CONFIG,
) -> SessionState:
    """Draw a summon for the side to move and arm it for placement.

    上限枚数に達した駒種を引いた場合は何も起きない（state をそのまま返す）。
    """
    if state.phase not in _ARMABLE_PHASES:
        return state
    piece_type = draw_summon(state.board, rng, config)
    if piece_type is None:
        return state
    return _arm(state, piece_type, from_pool=False)


def arm_captured(state: SessionState, index: int) -> SessionState:
    """Arm the index-th captured piece of the side to move for placement.

    持ち駒をタップした場合の処理。召喚と同じく空きマスすべてが配置先になる。
    選んだ駒は持ち駒から取り除かれる。
    """
    if state.phase not in _ARMABLE_PHASES:
        return state
    pool = list(state.pool(state.turn))
    if not 0 <= index < len(pool):
        raise OutOfRangeError(f"No captured piece at index {index}")
    piece_type = pool.pop(index)
    pools = list(state.pools)
    pools[state.turn.value] = tuple(pool)
    state = replace(state, pools=(pools[0], pools[1]))
    return _arm(state, piece_type, from_pool=True)


def choose_promotion(state: SessionState, accept: bool) -> SessionState:
    """Resolve a pending promotion; either choice completes the turn."""
    if state.phase != Phase.PROMOTION_PENDING or state.promotion_square is None:
        return state
    board = state.board
    if accept:
        piece = board.piece_at(state.promotion_square)
        assert piece is not None
        board = board.set_piece(
            state.promotion_square,
            Piece(PROMOTION_MAP[piece.piece_type], piece.owner),
        )
    return _complete_turn(replace(state, board=board))


def toggle_visualization(state: SessionState) -> SessionState:
    return replace(state, visualization=not state.visualization)


def visualization_overlay(state: SessionState) -> VisualizationOverlay:
    """Compute the visualization overlay for the side to move.

    可視化モードで表示する情報:
    - 手番側の玉が動けるマス（空き or 敵駒）
    - 盤上すべての駒（両陣営）の移動可能マス
    """
    king_square = state.board.find_king(state.turn)
    if king_square is None:
        king_options: frozenset[Square] = frozenset()
    else:
        king_options = escape_squares(king_square, state.turn, state.board)
    return VisualizationOverlay(king_options, all_targets(state.board))


def _select(state: SessionState, square: Square) -> SessionState:
    piece = state.board.piece_at(square)
    assert piece is not None
    return replace(
        state,
        phase=Phase.PIECE_SELECTED,
        selected=square,
        highlights=legal_targets(piece, square, state.board),
    )


def _arm(state: SessionState, piece_type: PieceType, from_pool: bool) -> SessionState:
    return replace(
        state,
        phase=Phase.PLACEMENT_ARMED,
        armed=piece_type,
        armed_from_pool=from_pool,
        selected=None,
        highlights=state.board.empty_squares(),
    )


def _move(state: SessionState, to_square: Square) -> SessionState:
    """Move (or capture with) the selected piece."""
    from_square = state.selected
    assert from_square is not None
    board = state.board
    piece = board.piece_at(from_square)
    assert piece is not None

    # Capture: 取った駒は成りを戻して持ち駒に加える
    pools = state.pools
    target = board.piece_at(to_square)
    if target is not None:
        pool_list = list(pools)
        pool_list[state.turn.value] = pools[state.turn.value] + (target.base_type,)
        pools = (pool_list[0], pool_list[1])

    board = board.set_piece(from_square, None).set_piece(to_square, piece)
    state = replace(
        state,
        board=board,
        pools=pools,
        selected=None,
        highlights=frozenset(),
        last_move=to_square,
    )

    # 玉を取った場合は成り判定をせず即座に終局へ
    if target is not None and target.piece_type == PieceType.KING:
        return _complete_turn(state)

    if can_promote(piece, to_square):
        return replace(state, phase=Phase.PROMOTION_PENDING, promotion_square=to_square)
    return _complete_turn(state)


def _place(state: SessionState, square: Square) -> SessionState:
    """Place the armed piece (unpromoted, owned by the side to move)."""
    assert state.armed is not None
    board = state.board.set_piece(square, Piece(state.armed, state.turn))
    return _complete_turn(replace(state, board=board, last_move=square))


def _complete_turn(state: SessionState) -> SessionState:
    """Flip the turn, then run the simplified mate check for the new side.

    次の手番側の玉が詰み（または既に取られている）なら、直前に指した側の勝ち。
    """
    mover = state.turn
    next_player = mover.opponent
    state = replace(
        state,
        turn=next_player,
        phase=Phase.AWAITING_SELECTION,
        armed=None,
        armed_from_pool=False,
        highlights=frozenset(),
        selected=None,
        promotion_square=None,
        move_count=state.move_count + 1,
    )
    king_square = state.board.find_king(next_player)
    if king_square is None or is_mated(king_square, next_player, state.board):
        return replace(state, phase=Phase.TERMINAL, winner=mover)
    return state
