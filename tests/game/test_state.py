"""Tests for the turn state machine."""

from __future__ import annotations

import random
from dataclasses import replace

import pytest

from summon_shogi.game.board import Board, Piece
from summon_shogi.game.errors import OutOfRangeError
from summon_shogi.game.state import (
    Phase,
    SessionState,
    arm_captured,
    can_promote,
    choose_promotion,
    new_session,
    request_summon,
    select_square,
    toggle_visualization,
    visualization_overlay,
)
from summon_shogi.game.types import PieceType, Player, Square


class FixedDraw:
    """Stub RNG whose randrange always returns the same value."""

    def __init__(self, value: int) -> None:
        self.value = value

    def randrange(self, stop: int) -> int:
        return self.value


PAWN_DRAW = FixedDraw(0)
LANCE_DRAW = FixedDraw(10)


def _state_with(
    pieces: list[tuple[int, int, PieceType, Player]],
    turn: Player = Player.SENTE,
) -> SessionState:
    """Session with both kings home plus the given pieces."""
    board = Board()
    for row, col, pt, owner in pieces:
        board = board.set_piece(Square(row, col), Piece(pt, owner))
    return SessionState(board=board, turn=turn)


def _move(state: SessionState, src: tuple[int, int], dst: tuple[int, int]) -> SessionState:
    state = select_square(state, Square(*src))
    return select_square(state, Square(*dst))


class TestNewSession:
    def test_initial_fields(self) -> None:
        state = new_session()
        assert state.turn == Player.SENTE
        assert state.phase == Phase.AWAITING_SELECTION
        assert state.highlights == frozenset()
        assert state.pools == ((), ())
        assert state.winner is None
        assert state.last_move == Square(8, 4)
        assert len(state.board.occupied()) == 2


class TestSelection:
    def test_select_own_piece_highlights_targets(self) -> None:
        state = select_square(new_session(), Square(8, 4))
        assert state.phase == Phase.PIECE_SELECTED
        assert state.selected == Square(8, 4)
        assert state.highlights == {Square(7, 3), Square(7, 4), Square(7, 5), Square(8, 3), Square(8, 5)}

    def test_select_enemy_piece_is_noop(self) -> None:
        state = new_session()
        assert select_square(state, Square(0, 4)) is state

    def test_select_empty_square_is_noop(self) -> None:
        state = new_session()
        assert select_square(state, Square(4, 4)) is state

    def test_tap_selected_square_deselects(self) -> None:
        state = select_square(new_session(), Square(8, 4))
        state = select_square(state, Square(8, 4))
        assert state.phase == Phase.AWAITING_SELECTION
        assert state.selected is None
        assert state.highlights == frozenset()

    def test_tap_non_target_deselects(self) -> None:
        state = select_square(new_session(), Square(8, 4))
        state = select_square(state, Square(3, 3))
        assert state.phase == Phase.AWAITING_SELECTION
        assert state.turn == Player.SENTE

    def test_tap_other_own_piece_reselects(self) -> None:
        state = _state_with([(6, 0, PieceType.PAWN, Player.SENTE)])
        state = select_square(state, Square(8, 4))
        state = select_square(state, Square(6, 0))
        assert state.selected == Square(6, 0)
        assert state.highlights == {Square(5, 0)}

    def test_out_of_range_square(self) -> None:
        with pytest.raises(OutOfRangeError):
            select_square(new_session(), Square(9, 9))


class TestMoveAndCapture:
    def test_simple_move_flips_turn(self) -> None:
        state = _move(new_session(), (8, 4), (7, 4))
        assert state.board.piece_at(Square(7, 4)) == Piece(PieceType.KING, Player.SENTE)
        assert state.board.is_empty(Square(8, 4))
        assert state.turn == Player.GOTE
        assert state.phase == Phase.AWAITING_SELECTION
        assert state.last_move == Square(7, 4)
        assert state.move_count == 1
        assert state.board.find_king(Player.SENTE) == Square(7, 4)

    def test_capture_adds_to_pool(self) -> None:
        state = _state_with([
            (5, 4, PieceType.PAWN, Player.SENTE),
            (4, 4, PieceType.SILVER, Player.GOTE),
        ])
        state = _move(state, (5, 4), (4, 4))
        assert state.pool(Player.SENTE) == (PieceType.SILVER,)
        assert state.pool(Player.GOTE) == ()

    def test_capturing_dragon_pools_rook(self) -> None:
        state = _state_with([
            (5, 4, PieceType.GOLD, Player.SENTE),
            (4, 4, PieceType.DRAGON, Player.GOTE),
        ])
        state = _move(state, (5, 4), (4, 4))
        assert state.pool(Player.SENTE) == (PieceType.ROOK,)

    def test_gote_capture_goes_to_gote_pool(self) -> None:
        state = _state_with(
            [
                (3, 4, PieceType.PAWN, Player.GOTE),
                (4, 4, PieceType.PRO_PAWN, Player.SENTE),
            ],
            turn=Player.GOTE,
        )
        state = _move(state, (3, 4), (4, 4))
        assert state.pool(Player.GOTE) == (PieceType.PAWN,)
        assert state.turn == Player.SENTE

    def test_move_to_non_highlight_keeps_board(self) -> None:
        state = _state_with([(5, 4, PieceType.PAWN, Player.SENTE)])
        moved = _move(state, (5, 4), (3, 4))
        assert moved.board == state.board
        assert moved.turn == Player.SENTE

    def test_capturing_king_ends_game(self) -> None:
        state = _state_with([(1, 4, PieceType.GOLD, Player.SENTE)])
        state = _move(state, (1, 4), (0, 4))
        assert state.phase == Phase.TERMINAL
        assert state.winner == Player.SENTE
        assert state.promotion_square is None


class TestPromotion:
    def test_pawn_into_zone_offers_promotion(self) -> None:
        state = _state_with([(3, 4, PieceType.PAWN, Player.SENTE)])
        state = _move(state, (3, 4), (2, 4))
        assert state.phase == Phase.PROMOTION_PENDING
        assert state.promotion_square == Square(2, 4)
        assert state.turn == Player.SENTE

    def test_decline_keeps_pawn_and_flips_turn(self) -> None:
        state = _state_with([(3, 4, PieceType.PAWN, Player.SENTE)])
        state = choose_promotion(_move(state, (3, 4), (2, 4)), accept=False)
        assert state.board.piece_at(Square(2, 4)) == Piece(PieceType.PAWN, Player.SENTE)
        assert state.turn == Player.GOTE
        assert state.phase == Phase.AWAITING_SELECTION

    def test_accept_promotes(self) -> None:
        state = _state_with([(3, 4, PieceType.PAWN, Player.SENTE)])
        state = choose_promotion(_move(state, (3, 4), (2, 4)), accept=True)
        piece = state.board.piece_at(Square(2, 4))
        assert piece == Piece(PieceType.PRO_PAWN, Player.SENTE)
        assert piece is not None and piece.promoted
        assert state.turn == Player.GOTE

    def test_gote_zone_is_rows_6_to_8(self) -> None:
        state = _state_with([(5, 0, PieceType.ROOK, Player.GOTE)], turn=Player.GOTE)
        state = choose_promotion(_move(state, (5, 0), (6, 0)), accept=True)
        assert state.board.piece_at(Square(6, 0)) == Piece(PieceType.DRAGON, Player.GOTE)

    def test_gold_never_offered(self) -> None:
        state = _state_with([(3, 0, PieceType.GOLD, Player.SENTE)])
        state = _move(state, (3, 0), (2, 0))
        assert state.phase == Phase.AWAITING_SELECTION
        assert state.turn == Player.GOTE

    def test_promoted_piece_not_offered_again(self) -> None:
        state = _state_with([(3, 0, PieceType.PRO_SILVER, Player.SENTE)])
        state = _move(state, (3, 0), (2, 0))
        assert state.phase == Phase.AWAITING_SELECTION

    def test_inputs_ignored_while_pending(self) -> None:
        state = _state_with([(3, 4, PieceType.PAWN, Player.SENTE)])
        pending = _move(state, (3, 4), (2, 4))
        assert select_square(pending, Square(8, 4)) is pending
        assert request_summon(pending, LANCE_DRAW) is pending  # type: ignore[arg-type]

    def test_choose_promotion_without_pending_is_noop(self) -> None:
        state = new_session()
        assert choose_promotion(state, accept=True) is state

    def test_can_promote_rules(self) -> None:
        assert can_promote(Piece(PieceType.SILVER, Player.SENTE), Square(2, 0))
        assert not can_promote(Piece(PieceType.SILVER, Player.SENTE), Square(3, 0))
        assert can_promote(Piece(PieceType.BISHOP, Player.GOTE), Square(6, 0))
        assert not can_promote(Piece(PieceType.BISHOP, Player.GOTE), Square(2, 0))
        assert not can_promote(Piece(PieceType.KING, Player.SENTE), Square(0, 0))
        assert not can_promote(Piece(PieceType.HORSE, Player.SENTE), Square(0, 0))


class TestSummon:
    def test_lance_summon_arms_placement(self) -> None:
        state = request_summon(new_session(), LANCE_DRAW)  # type: ignore[arg-type]
        assert state.phase == Phase.PLACEMENT_ARMED
        assert state.armed == PieceType.LANCE
        assert not state.armed_from_pool
        assert state.highlights == state.board.empty_squares()
        assert len(state.highlights) == 79

    def test_capped_pawn_summon_produces_nothing(self) -> None:
        board = Board()
        for sq in sorted(board.empty_squares())[:18]:
            board = board.set_piece(sq, Piece(PieceType.PAWN, Player.GOTE))
        state = SessionState(board=board)
        result = request_summon(state, PAWN_DRAW)  # type: ignore[arg-type]
        assert result is state
        assert result.highlights == frozenset()
        assert result.armed is None

    def test_place_summoned_piece(self) -> None:
        state = request_summon(new_session(), LANCE_DRAW)  # type: ignore[arg-type]
        state = select_square(state, Square(1, 0))
        assert state.board.piece_at(Square(1, 0)) == Piece(PieceType.LANCE, Player.SENTE)
        assert state.turn == Player.GOTE
        assert state.armed is None
        assert state.last_move == Square(1, 0)
        # 敵陣への配置でも成りは発生しない
        assert state.phase == Phase.AWAITING_SELECTION

    def test_gote_summon_is_owned_by_gote(self) -> None:
        state = SessionState(turn=Player.GOTE)
        state = select_square(request_summon(state, PAWN_DRAW), Square(4, 4))  # type: ignore[arg-type]
        assert state.board.piece_at(Square(4, 4)) == Piece(PieceType.PAWN, Player.GOTE)

    def test_place_on_occupied_square_is_noop(self) -> None:
        armed = request_summon(new_session(), LANCE_DRAW)  # type: ignore[arg-type]
        assert select_square(armed, Square(0, 4)) is armed

    def test_second_summon_while_armed_is_noop(self) -> None:
        armed = request_summon(new_session(), LANCE_DRAW)  # type: ignore[arg-type]
        assert request_summon(armed, PAWN_DRAW) is armed  # type: ignore[arg-type]

    def test_summon_drops_selection(self) -> None:
        state = select_square(new_session(), Square(8, 4))
        state = request_summon(state, LANCE_DRAW)  # type: ignore[arg-type]
        assert state.selected is None
        assert state.phase == Phase.PLACEMENT_ARMED

    def test_seeded_summon_is_reproducible(self) -> None:
        a = request_summon(new_session(), random.Random(3))
        b = request_summon(new_session(), random.Random(3))
        assert a.armed == b.armed


class TestCapturedPlacement:
    def _with_pool(self) -> SessionState:
        return replace(new_session(), pools=((PieceType.SILVER, PieceType.ROOK), (PieceType.GOLD,)))

    def test_arm_captured_removes_from_pool(self) -> None:
        state = arm_captured(self._with_pool(), 1)
        assert state.phase == Phase.PLACEMENT_ARMED
        assert state.armed == PieceType.ROOK
        assert state.armed_from_pool
        assert state.pool(Player.SENTE) == (PieceType.SILVER,)
        assert state.pool(Player.GOTE) == (PieceType.GOLD,)

    def test_place_captured_piece(self) -> None:
        state = select_square(arm_captured(self._with_pool(), 0), Square(2, 2))
        assert state.board.piece_at(Square(2, 2)) == Piece(PieceType.SILVER, Player.SENTE)
        assert state.phase == Phase.AWAITING_SELECTION
        assert state.turn == Player.GOTE
        assert not state.armed_from_pool

    def test_bad_index_raises(self) -> None:
        with pytest.raises(OutOfRangeError):
            arm_captured(self._with_pool(), 2)

    def test_uses_side_to_move_pool(self) -> None:
        state = replace(self._with_pool(), turn=Player.GOTE)
        state = arm_captured(state, 0)
        assert state.armed == PieceType.GOLD
        assert state.pool(Player.GOTE) == ()


class TestCheckmate:
    def test_surrounded_king_loses_after_opponent_moves(self) -> None:
        # 先手の玉の周囲5マスを味方の駒で埋め、後手が1手指す
        walls = [(7, 3), (7, 4), (7, 5), (8, 3), (8, 5)]
        state = _state_with(
            [(r, c, PieceType.GOLD, Player.SENTE) for r, c in walls],
            turn=Player.GOTE,
        )
        state = _move(state, (0, 4), (1, 4))
        assert state.phase == Phase.TERMINAL
        assert state.winner == Player.GOTE

    def test_terminal_ignores_inputs(self) -> None:
        walls = [(7, 3), (7, 4), (7, 5), (8, 3), (8, 5)]
        state = _state_with(
            [(r, c, PieceType.GOLD, Player.SENTE) for r, c in walls],
            turn=Player.GOTE,
        )
        terminal = _move(state, (0, 4), (1, 4))
        assert select_square(terminal, Square(7, 4)) is terminal
        assert request_summon(terminal, LANCE_DRAW) is terminal  # type: ignore[arg-type]
        assert choose_promotion(terminal, accept=True) is terminal

    def test_only_next_side_king_is_checked(self) -> None:
        # 後手が自分の王の最後の逃げ道を塞いでも、その直後に調べるのは先手の玉
        walls = [(0, 3), (0, 5), (1, 3), (1, 5)]
        state = _state_with(
            [(r, c, PieceType.SILVER, Player.GOTE) for r, c in walls],
            turn=Player.GOTE,
        )
        state = select_square(request_summon(state, PAWN_DRAW), Square(1, 4))  # type: ignore[arg-type]
        assert state.phase == Phase.AWAITING_SELECTION
        assert state.turn == Player.SENTE

        # 先手が指した後に後手の玉を調べる → 詰み
        state = _move(state, (8, 4), (7, 4))
        assert state.phase == Phase.TERMINAL
        assert state.winner == Player.SENTE


class TestVisualization:
    def test_toggle(self) -> None:
        state = toggle_visualization(new_session())
        assert state.visualization
        assert not toggle_visualization(state).visualization

    def test_overlay_for_side_to_move(self) -> None:
        overlay = visualization_overlay(new_session())
        assert Square(7, 4) in overlay.king_options
        assert Square(1, 4) not in overlay.king_options
        assert Square(1, 4) in overlay.all_options
