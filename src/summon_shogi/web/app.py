"""FastAPI web application for playing 召喚将棋.

FastAPI を使った召喚将棋の JSON API。
描画（マスの色・駒の向き・成りダイアログ）はフロントエンド側の仕事で、
ここではエンジンへの入力を受け取り、更新後の局面を返すだけ。

エンドポイント:
  POST /api/new-game           — 新規対局を開始（ゲームIDを返す）
  GET  /api/state/{id}         — 現在の局面情報を取得
  POST /api/select             — マスをタップ（駒の選択・移動・配置）
  POST /api/summon             — 召喚ボタン
  POST /api/captured           — 持ち駒をタップ（配置の準備）
  POST /api/promotion          — 成る/成らない の選択
  POST /api/visualization      — 可視化モードの切り替え
  POST /api/auto-move/{id}     — ランダムAIが手番側の1手を指す
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from summon_shogi.engine.random_player import random_turn
from summon_shogi.game.display import format_session, piece_char
from summon_shogi.game.engine import SummonShogiEngine
from summon_shogi.game.errors import OutOfRangeError
from summon_shogi.game.state import SessionState
from summon_shogi.game.types import Square

logger = logging.getLogger(__name__)

app = FastAPI(title="Summon Shogi")

# 対局情報のインメモリストレージ（サーバ再起動で消える簡易実装）
# 上限を超えたら最も古い対局から破棄する（dict は挿入順を保つ）
MAX_GAMES = 1000
_games: dict[str, SummonShogiEngine] = {}


class NewGameRequest(BaseModel):
    """新規対局リクエストのスキーマ。"""

    seed: int | None = None  # 召喚の乱数シード（再現したいときに指定）


class GameRequest(BaseModel):
    """対局IDだけを持つリクエスト。"""

    game_id: str


class SelectRequest(GameRequest):
    """マスのタップ。座標の範囲外は 422 で弾かれる。"""

    row: int = Field(ge=0, le=8)
    col: int = Field(ge=0, le=8)


class CapturedRequest(GameRequest):
    """持ち駒のタップ（手番側の持ち駒の何番目か）。"""

    index: int = Field(ge=0)


class PromotionRequest(GameRequest):
    accept: bool


def _square_to_list(square: Square | None) -> list[int] | None:
    if square is None:
        return None
    return [square.row, square.col]


def _squares_to_list(squares: frozenset[Square]) -> list[list[int]]:
    return [[sq.row, sq.col] for sq in sorted(squares)]


def _state_to_dict(engine: SummonShogiEngine) -> dict[str, Any]:
    """Convert the session to a JSON-serializable dict.

    フロントエンドの JavaScript がこの形式を受け取って盤面を描画する。
    """
    state: SessionState = engine.state
    squares: list[dict[str, Any] | None] = []
    for piece in state.board.squares:
        if piece is None:
            squares.append(None)
        else:
            squares.append(
                {
                    "type": piece.piece_type.value,  # 駒種インデックス
                    "owner": piece.owner.value,  # 所有者（0=先手, 1=後手）
                    "name": piece.piece_type.name,
                    "char": piece_char(piece),  # 表示文字（玉/王 を区別）
                    "promoted": piece.promoted,
                }
            )

    result: dict[str, Any] = {
        "turn": state.turn.value,  # 手番（0=先手, 1=後手）
        "phase": state.phase.value,
        "is_terminal": state.is_terminal,
        "winner": state.winner.value if state.winner is not None else None,
        "squares": squares,  # 81要素
        "highlights": _squares_to_list(state.highlights),
        "last_move": _square_to_list(state.last_move),
        "selected": _square_to_list(state.selected),
        "promotion_square": _square_to_list(state.promotion_square),
        "armed": state.armed.name if state.armed is not None else None,
        "pools": [[pt.name for pt in pool] for pool in state.pools],
        "move_count": state.move_count,
        "visualization": state.visualization,
        "board_display": format_session(state),
    }
    if state.visualization:
        overlay = engine.visualization_overlay()
        result["king_options"] = _squares_to_list(overlay.king_options)
        result["all_options"] = _squares_to_list(overlay.all_options)
    return result


def _get_engine(game_id: str) -> SummonShogiEngine:
    engine = _games.get(game_id)
    if engine is None:
        raise HTTPException(404, "Game not found")
    return engine


def _finish(game_id: str, engine: SummonShogiEngine, was_terminal: bool) -> dict[str, Any]:
    if engine.state.is_terminal and not was_terminal:
        logger.info("game %s finished, winner=%s", game_id, engine.state.winner)
    return _state_to_dict(engine)


@app.post("/api/new-game")
async def new_game(req: NewGameRequest) -> dict[str, Any]:
    """新規対局を開始する。

    対局IDと初期局面情報を返す。
    対局IDはその後のすべてのリクエストで使用する。
    """
    game_id = str(uuid.uuid4())[:8]  # 短いIDを生成
    rng = random.Random(req.seed)
    while len(_games) >= MAX_GAMES:
        evicted = next(iter(_games))
        del _games[evicted]
        logger.info("game %s evicted (store full)", evicted)
    _games[game_id] = SummonShogiEngine(rng=rng)
    logger.info("game %s created (seed=%s)", game_id, req.seed)
    return {"game_id": game_id, "state": _state_to_dict(_games[game_id])}


@app.get("/api/state/{game_id}")
async def get_state(game_id: str) -> dict[str, Any]:
    """現在の局面情報を取得する（ページ再読み込み時などに使用）。"""
    return _state_to_dict(_get_engine(game_id))


@app.post("/api/select")
async def select(req: SelectRequest) -> dict[str, Any]:
    """マスのタップ。受け付けられない入力は無視して現局面を返す。"""
    engine = _get_engine(req.game_id)
    was_terminal = engine.state.is_terminal
    engine.select_square(req.row, req.col)
    return _finish(req.game_id, engine, was_terminal)


@app.post("/api/summon")
async def summon(req: GameRequest) -> dict[str, Any]:
    """召喚する。上限に達した駒種を引いた場合は何も起きない。"""
    engine = _get_engine(req.game_id)
    engine.request_summon()
    return _state_to_dict(engine)


@app.post("/api/captured")
async def captured(req: CapturedRequest) -> dict[str, Any]:
    """持ち駒を配置の準備状態にする。"""
    engine = _get_engine(req.game_id)
    try:
        engine.arm_captured(req.index)
    except OutOfRangeError as e:
        raise HTTPException(400, str(e)) from e
    return _state_to_dict(engine)


@app.post("/api/promotion")
async def promotion(req: PromotionRequest) -> dict[str, Any]:
    engine = _get_engine(req.game_id)
    was_terminal = engine.state.is_terminal
    engine.choose_promotion(req.accept)
    return _finish(req.game_id, engine, was_terminal)


@app.post("/api/visualization")
async def visualization(req: GameRequest) -> dict[str, Any]:
    """可視化モード（玉の逃げ道・全駒の利き）を切り替える。"""
    engine = _get_engine(req.game_id)
    engine.toggle_visualization()
    return _state_to_dict(engine)


@app.post("/api/auto-move/{game_id}")
async def auto_move(game_id: str) -> dict[str, Any]:
    """ランダムAIが現在の手番プレイヤーの1手を指す。

    相手（後手）の手番でフロントエンドが呼び出すことで、人間対AIの対局になる。
    """
    engine = _get_engine(game_id)
    if engine.state.is_terminal:
        raise HTTPException(400, "Game is already over")
    moved_by = engine.state.turn.value
    engine.load(random_turn(engine.state, engine.rng, summon_config=engine.config))
    return {
        "state": _finish(game_id, engine, was_terminal=False),
        "moved_by": moved_by,
    }


def main() -> None:
    """Run the web server.

    `summon-shogi-web` または `python -m summon_shogi.web.app` で起動する。
    """
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
