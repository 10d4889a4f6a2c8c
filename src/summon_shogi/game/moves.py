"""Legal target generation for 召喚将棋.

駒1枚について、移動・駒取りできるマスの集合を求める。

召喚将棋の簡易ルールでは王手放置のチェックを行わないため、
ここで返すマスがそのまま「合法な移動先」になる。
  - 1マス移動（STEP_MOVES）と桂馬のジャンプは盤外と味方の駒を除外するだけ
  - 遠距離移動（SLIDE_MOVES）は最初に駒に当たったところで止まる
    （敵駒ならそのマスを含み、味方駒なら含まない）
"""

from __future__ import annotations

from summon_shogi.game.board import Board, Piece
from summon_shogi.game.types import (
    KNIGHT_MOVES,
    SLIDE_MOVES,
    STEP_MOVES,
    PieceType,
    Player,
    Square,
)


def legal_targets(piece: Piece, from_square: Square, board: Board) -> frozenset[Square]:
    """Return every square the piece may move to or capture on."""
    owner = piece.owner
    pt = piece.piece_type
    targets: set[Square] = set()

    # Step moves
    for dr, dc in STEP_MOVES.get(pt, []):
        _add_if_reachable(targets, board, owner, from_square, _orient(dr, owner), dc)

    # Knight moves（途中の駒に妨げられない）
    if pt == PieceType.KNIGHT:
        for dr, dc in KNIGHT_MOVES:
            _add_if_reachable(targets, board, owner, from_square, _orient(dr, owner), dc)

    # Slide moves
    for dr, dc in SLIDE_MOVES.get(pt, []):
        dr = _orient(dr, owner)
        current = from_square.offset(dr, dc)
        while current is not None:
            target = board.piece_at(current)
            if target is not None and target.owner == owner:
                break
            targets.add(current)
            if target is not None:
                break  # Captured, stop sliding
            current = current.offset(dr, dc)

    return frozenset(targets)


def all_targets(board: Board, owner: Player | None = None) -> frozenset[Square]:
    """Union of legal targets of every piece (optionally one side only).

    盤上すべての駒の利きをまとめて返す。可視化オーバーレイで使用する。
    """
    result: set[Square] = set()
    for square, piece in board.occupied():
        if owner is not None and piece.owner != owner:
            continue
        result |= legal_targets(piece, square, board)
    return frozenset(result)


def _orient(dr: int, owner: Player) -> int:
    # 方向テーブルは先手視点なので、後手は行方向を反転する
    return -dr if owner == Player.GOTE else dr


def _add_if_reachable(
    targets: set[Square],
    board: Board,
    owner: Player,
    origin: Square,
    dr: int,
    dc: int,
) -> None:
    dest = origin.offset(dr, dc)
    if dest is None:
        return
    target = board.piece_at(dest)
    if target is None or target.owner != owner:
        targets.add(dest)
