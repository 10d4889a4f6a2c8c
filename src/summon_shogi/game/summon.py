"""Summon selector — weighted random draw of the next piece type.

召喚: 手番のプレイヤーは持ち駒を選ぶ代わりに、重み付きランダムで
新しい駒を1枚「召喚」し、空いているマスに置くことができる。

抽選の手順:
1. 0 以上 重みの合計(31) 未満の整数を一様に引く
2. 累積重みのテーブルをたどって駒種を決める
3. その駒種が盤上で上限枚数に達していれば、今回の召喚は不発（再抽選しない）
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from summon_shogi.game.board import Board
from summon_shogi.game.types import PieceType


def _default_weights() -> dict[PieceType, int]:
    return {
        PieceType.PAWN: 10,
        PieceType.LANCE: 5,
        PieceType.KNIGHT: 5,
        PieceType.SILVER: 4,
        PieceType.GOLD: 3,
        PieceType.BISHOP: 2,
        PieceType.ROOK: 2,
    }


def _default_caps() -> dict[PieceType, int]:
    # 本将棋の駒の総数と同じ（歩18、香桂銀金4、角飛2）
    return {
        PieceType.PAWN: 18,
        PieceType.LANCE: 4,
        PieceType.KNIGHT: 4,
        PieceType.SILVER: 4,
        PieceType.GOLD: 4,
        PieceType.BISHOP: 2,
        PieceType.ROOK: 2,
    }


@dataclass(frozen=True)
class SummonConfig:
    """Configuration for summon draws.

    weights: 駒種ごとの抽選の重み（出現しやすさ）
    caps:    駒種ごとの盤上の最大枚数（成り駒も元の駒種として数える）

    どちらも読み取り専用のマッピングとして保持する（共有の既定値を書き換えられない）。
    """

    weights: Mapping[PieceType, int] = field(default_factory=_default_weights)
    caps: Mapping[PieceType, int] = field(default_factory=_default_caps)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))
        object.__setattr__(self, "caps", MappingProxyType(dict(self.caps)))

    def __hash__(self) -> int:
        return hash((tuple(self.weights.items()), tuple(self.caps.items())))

    @property
    def total_weight(self) -> int:
        return sum(self.weights.values())


DEFAULT_SUMMON_CONFIG = SummonConfig()


def weighted_choice(
    rng: random.Random,
    config: SummonConfig = DEFAULT_SUMMON_CONFIG,
) -> PieceType:
    """Draw one piece type with probability weight / total_weight."""
    value = rng.randrange(config.total_weight)
    cumulative = 0
    for piece_type, weight in config.weights.items():
        cumulative += weight
        if value < cumulative:
            return piece_type
    # randrange は total 未満を返すのでここには来ない
    raise AssertionError(f"draw {value} outside cumulative table")


def can_summon(
    board: Board,
    piece_type: PieceType,
    config: SummonConfig = DEFAULT_SUMMON_CONFIG,
) -> bool:
    """盤上の枚数が上限未満なら True。"""
    return board.count_base_type(piece_type) < config.caps.get(piece_type, 0)


def draw_summon(
    board: Board,
    rng: random.Random,
    config: SummonConfig = DEFAULT_SUMMON_CONFIG,
) -> PieceType | None:
    """Draw a summon for this turn, or None when the drawn type is capped.

    上限に達した駒種を引いた場合は None を返す（別の駒種で引き直さない）。
    """
    piece_type = weighted_choice(rng, config)
    if not can_summon(board, piece_type, config):
        return None
    return piece_type
