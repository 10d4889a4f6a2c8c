"""Board representation for 召喚将棋 (9x9).

9×9盤の盤面データ構造。イミュータブルなデータクラスで、変更メソッドは
新しいオブジェクトを返す。ルールは一切チェックしない（単なる入れ物）。
"""

from __future__ import annotations

from dataclasses import dataclass, field

from summon_shogi.game.types import (
    KING_HOME,
    NUM_SQUARES,
    UNPROMOTION_MAP,
    PieceType,
    Player,
    Square,
)


@dataclass(frozen=True)
class Piece:
    """A piece on the board.

    盤面上の駒。種類と所有者を持つ。成りフラグは駒種から導出する。
    """

    piece_type: PieceType
    owner: Player

    @property
    def promoted(self) -> bool:
        """成り駒なら True。"""
        return self.piece_type in UNPROMOTION_MAP

    @property
    def base_type(self) -> PieceType:
        """成る前の駒種（未成駒・金・玉はそのまま）。"""
        return UNPROMOTION_MAP.get(self.piece_type, self.piece_type)


@dataclass(frozen=True)
class Board:
    """Immutable board state for 9x9 召喚将棋.

    squares: 81要素のタプル（行優先）。squares[row * COLS + col] でアクセス。
    初期状態は玉と王の2枚だけ（他の駒はすべて召喚で登場する）。
    """

    squares: tuple[Piece | None, ...] = field(
        default_factory=lambda: Board._initial_squares()
    )

    @staticmethod
    def _initial_squares() -> tuple[Piece | None, ...]:
        """Return the starting position: the two kings on their home squares.

        先手の玉は (8, 4)、後手の王は (0, 4)。
        """
        squares: list[Piece | None] = [None] * NUM_SQUARES
        for player, (row, col) in KING_HOME.items():
            squares[Square(row, col).index] = Piece(PieceType.KING, player)
        return tuple(squares)

    @classmethod
    def empty(cls) -> Board:
        """駒が1枚もない盤面（テスト・局面作成用）。"""
        return cls(squares=(None,) * NUM_SQUARES)

    def piece_at(self, square: Square) -> Piece | None:
        """マスの駒を返す。駒がなければ None。"""
        return self.squares[square.index]

    def set_piece(self, square: Square, piece: Piece | None) -> Board:
        """マスの駒を変更した新しい Board を返す。"""
        squares = list(self.squares)
        squares[square.index] = piece
        return Board(squares=tuple(squares))

    def is_empty(self, square: Square) -> bool:
        return self.squares[square.index] is None

    def occupied(self) -> list[tuple[Square, Piece]]:
        """駒のあるマスと駒の組を行優先で返す。"""
        return [
            (Square.from_index(idx), piece)
            for idx, piece in enumerate(self.squares)
            if piece is not None
        ]

    def empty_squares(self) -> frozenset[Square]:
        """空きマスの集合（召喚駒・持ち駒の配置先）。"""
        return frozenset(
            Square.from_index(idx)
            for idx, piece in enumerate(self.squares)
            if piece is None
        )

    def find_king(self, player: Player) -> Square | None:
        """プレイヤーの王将のマスを返す。王将がなければ None。"""
        for idx, piece in enumerate(self.squares):
            if (
                piece is not None
                and piece.piece_type == PieceType.KING
                and piece.owner == player
            ):
                return Square.from_index(idx)
        return None

    def count_base_type(self, piece_type: PieceType) -> int:
        """Count pieces of a base type on the board, promoted forms included.

        盤上にある指定駒種の枚数（両陣営の合計）を返す。
        成り駒は元の駒種として数える（例: 竜は飛車1枚）。召喚の上限判定に使う。
        """
        return sum(
            1 for piece in self.squares
            if piece is not None and piece.base_type == piece_type
        )
