"""召喚将棋 (Summon Shogi) — 9x9 rules engine with weighted summons."""

from summon_shogi.game.board import Board, Piece
from summon_shogi.game.display import format_board, format_session
from summon_shogi.game.engine import SummonShogiEngine
from summon_shogi.game.errors import InvalidTransitionError, OutOfRangeError
from summon_shogi.game.moves import legal_targets
from summon_shogi.game.state import Phase, SessionState
from summon_shogi.game.types import COLS, ROWS, PieceType, Player, Square

__all__ = [
    "Board",
    "COLS",
    "InvalidTransitionError",
    "OutOfRangeError",
    "Phase",
    "Piece",
    "PieceType",
    "Player",
    "ROWS",
    "SessionState",
    "Square",
    "SummonShogiEngine",
    "format_board",
    "format_session",
    "legal_targets",
]
