"""Simplified checkmate detection.

簡易詰み判定: 玉の周囲8マスのうち、盤内で「空き」または「敵駒」のマスが
1つもなければ詰みとみなす。実際に王手がかかっているか、逃げた先が
安全かどうかは調べない（召喚将棋のルールそのもの）。
"""

from __future__ import annotations

from summon_shogi.game.board import Board
from summon_shogi.game.types import STEP_MOVES, PieceType, Player, Square


def escape_squares(king_square: Square, king_owner: Player, board: Board) -> frozenset[Square]:
    """Adjacent squares that are empty or hold an enemy piece."""
    result: set[Square] = set()
    for dr, dc in STEP_MOVES[PieceType.KING]:
        dest = king_square.offset(dr, dc)
        if dest is None:
            continue
        target = board.piece_at(dest)
        if target is None or target.owner != king_owner:
            result.add(dest)
    return frozenset(result)


def is_mated(king_square: Square, king_owner: Player, board: Board) -> bool:
    """True iff the king has no empty or enemy-occupied adjacent square."""
    return not escape_squares(king_square, king_owner, board)
