"""Command facade over the Summon Shogi state machine.

描画側（CLI・Web・GUI）が呼び出す窓口。1つのセッション状態と乱数源を持ち、
入力ごとに state.py の純粋関数で状態を更新して新しい状態を返す。

strict=True のときは、受け付けられなかった入力で InvalidTransitionError を送出する
（通常は元のゲームと同じく黙って無視する）。
"""

from __future__ import annotations

import logging
import random

from summon_shogi.game import state as transitions
from summon_shogi.game.errors import InvalidTransitionError
from summon_shogi.game.state import SessionState, VisualizationOverlay
from summon_shogi.game.summon import DEFAULT_SUMMON_CONFIG, SummonConfig
from summon_shogi.game.types import Square

logger = logging.getLogger(__name__)


class SummonShogiEngine:
    """Owns exactly one session and dispatches external inputs to it."""

    def __init__(
        self,
        rng: random.Random | None = None,
        config: SummonConfig = DEFAULT_SUMMON_CONFIG,
        strict: bool = False,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.config = config
        self.strict = strict
        self._state = transitions.new_session()

    @property
    def state(self) -> SessionState:
        """現在のセッション状態（読み取り専用のスナップショット）。"""
        return self._state

    def reset(self) -> SessionState:
        self._state = transitions.new_session()
        logger.debug("session reset")
        return self._state

    def select_square(self, row: int, col: int) -> SessionState:
        # 盤外なら Square の生成で OutOfRangeError（状態は変わらない）
        square = Square(row, col)
        return self._apply("select", transitions.select_square(self._state, square))

    def request_summon(self) -> SessionState:
        return self._apply(
            "summon",
            transitions.request_summon(self._state, self.rng, self.config),
        )

    def arm_captured(self, index: int) -> SessionState:
        return self._apply("captured", transitions.arm_captured(self._state, index))

    def choose_promotion(self, accept: bool) -> SessionState:
        return self._apply("promotion", transitions.choose_promotion(self._state, accept))

    def toggle_visualization(self) -> SessionState:
        self._state = transitions.toggle_visualization(self._state)
        return self._state

    def load(self, state: SessionState) -> SessionState:
        """外部で計算した状態（ランダムAIが指した後の局面など）に置き換える。"""
        return self._apply("load", state)

    def visualization_overlay(self) -> VisualizationOverlay:
        return transitions.visualization_overlay(self._state)

    def _apply(self, command: str, new_state: SessionState) -> SessionState:
        old_state = self._state
        if new_state is old_state:
            # 状態が変わらない = 入力が受け付けられなかった（召喚の不発も含む）
            logger.debug("%s ignored in phase %s", command, old_state.phase.value)
            if self.strict:
                msg = f"{command} rejected in phase {old_state.phase.value}"
                raise InvalidTransitionError(msg)
            return old_state

        self._state = new_state
        logger.debug(
            "%s accepted: phase %s -> %s",
            command,
            old_state.phase.value,
            new_state.phase.value,
        )
        if new_state.is_terminal and not old_state.is_terminal:
            assert new_state.winner is not None
            logger.info(
                "game over after %d moves, winner: %s",
                new_state.move_count,
                new_state.winner.name,
            )
        return new_state
