"""Error types raised by the Summon Shogi rules engine.

エンジンが送出する例外は2種類だけ:
- OutOfRangeError: 盤外の座標（または存在しない持ち駒番号）を指定した
- InvalidTransitionError: 現在の局面では受け付けない入力（strict モードのみ送出）
"""

from __future__ import annotations


class OutOfRangeError(ValueError):
    """Coordinate outside the 9x9 grid."""


class InvalidTransitionError(ValueError):
    """Input rejected for the current phase of the game."""
