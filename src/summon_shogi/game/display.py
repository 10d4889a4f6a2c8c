"""Terminal display for 召喚将棋."""

from __future__ import annotations

from summon_shogi.game.board import Board, Piece
from summon_shogi.game.state import SessionState
from summon_shogi.game.types import COLS, ROWS, PieceType, Player, Square

# Display characters for pieces
PIECE_CHARS: dict[PieceType, str] = {
    PieceType.PAWN: "歩",
    PieceType.LANCE: "香",
    PieceType.KNIGHT: "桂",
    PieceType.SILVER: "銀",
    PieceType.GOLD: "金",
    PieceType.BISHOP: "角",
    PieceType.ROOK: "飛",
    PieceType.KING: "玉",
    PieceType.PRO_PAWN: "と",
    PieceType.PRO_LANCE: "杏",
    PieceType.PRO_KNIGHT: "圭",
    PieceType.PRO_SILVER: "全",
    PieceType.HORSE: "馬",
    PieceType.DRAGON: "竜",
}


def piece_char(piece: Piece) -> str:
    """駒の表示文字。後手の玉は「王」と表示する。"""
    if piece.piece_type == PieceType.KING and piece.owner == Player.GOTE:
        return "王"
    return PIECE_CHARS[piece.piece_type]


def format_board(board: Board, highlights: frozenset[Square] = frozenset()) -> str:
    """Format the board for terminal display.

    後手の駒には "v" を付ける。ハイライトされた空きマスは "・" で表示する。
    """
    lines: list[str] = []
    lines.append("   0  1  2  3  4  5  6  7  8")
    lines.append("  +--+--+--+--+--+--+--+--+--+")

    for r in range(ROWS):
        row_str = f"{r} |"
        for c in range(COLS):
            square = Square(r, c)
            piece = board.piece_at(square)
            if piece is None:
                row_str += "・|" if square in highlights else "  |"
            elif piece.owner == Player.GOTE:
                row_str += f"v{piece_char(piece)}|"
            else:
                row_str += f" {piece_char(piece)}|"
        lines.append(row_str)
        lines.append("  +--+--+--+--+--+--+--+--+--+")

    return "\n".join(lines)


def format_session(state: SessionState) -> str:
    """盤面と持ち駒・手番をまとめて表示する。"""
    lines = [
        f"後手持駒: {format_pool(state.pool(Player.GOTE))}",
        format_board(state.board, state.highlights),
        f"先手持駒: {format_pool(state.pool(Player.SENTE))}",
    ]
    if state.winner is not None:
        lines.append(f"詰み: {'先手' if state.winner == Player.SENTE else '後手'}勝利")
    else:
        lines.append(f"手番: {'先手' if state.turn == Player.SENTE else '後手'}")
    return "\n".join(lines)


def format_pool(pool: tuple[PieceType, ...]) -> str:
    if not pool:
        return "なし"
    return " ".join(f"{i}:{PIECE_CHARS[pt]}" for i, pt in enumerate(pool))
