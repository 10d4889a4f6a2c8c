"""CLI entry point for summon-shogi — Human vs Random AI.

コマンドラインで動く召喚将棋の対局プログラム。
プレイヤー（先手）対ランダムAI（後手）、または --hot-seat で人間同士の対局。

起動方法: `summon-shogi-cli [--hot-seat] [--seed N]`

入力コマンド:
  r c   マス (行 r, 列 c) をタップ（駒の選択・移動・配置）
  s     召喚
  p i   持ち駒の i 番目を配置の準備
  y / n 成る / 成らない
  v     可視化モードの切り替え
  q     終了
"""

from __future__ import annotations

import argparse
import logging
import random

from summon_shogi.engine.random_player import random_turn
from summon_shogi.game.display import format_session
from summon_shogi.game.engine import SummonShogiEngine
from summon_shogi.game.errors import OutOfRangeError
from summon_shogi.game.state import Phase
from summon_shogi.game.types import Player


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summon Shogi in the terminal")
    parser.add_argument("--hot-seat", action="store_true", help="two human players")
    parser.add_argument("--seed", type=int, default=None, help="random seed for summons")
    parser.add_argument("--verbose", action="store_true", help="log engine transitions")
    return parser.parse_args(argv)


def _handle_command(engine: SummonShogiEngine, command: str) -> bool:
    """Apply one line of input. Returns False when the player quits.

    1行の入力をエンジンへの操作に変換する。
    """
    parts = command.split()
    if not parts:
        return True
    head = parts[0].lower()

    if head == "q":
        return False
    if head == "s":
        before = engine.state
        if engine.request_summon() is before:
            print("召喚できませんでした。")
    elif head == "v":
        engine.toggle_visualization()
    elif head in ("y", "n"):
        engine.choose_promotion(head == "y")
    elif head == "p" and len(parts) == 2:
        engine.arm_captured(int(parts[1]))
    elif len(parts) == 2:
        engine.select_square(int(parts[0]), int(parts[1]))
    else:
        print("Unknown command.")
    return True


def main(argv: list[str] | None = None) -> None:
    """Run a Human (SENTE) vs Random AI (GOTE) game.

    ゲームの流れ:
    1. 盤面を表示
    2. 人間の手番ならコマンドを入力、AIの手番なら AI が1手指す
    3. 詰みになるまで繰り返す
    """
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    engine = SummonShogiEngine(rng=random.Random(args.seed))
    print("=== 召喚将棋 ===")
    print("You are SENTE (bottom). Commands: 'r c', s, p i, y/n, v, q")
    print()

    while not engine.state.is_terminal:
        state = engine.state
        print(format_session(state))
        if state.visualization:
            overlay = engine.visualization_overlay()
            print(f"玉の逃げ道: {sorted((sq.row, sq.col) for sq in overlay.king_options)}")
        if state.phase == Phase.PROMOTION_PENDING:
            print("成りますか？ (y/n)")
        print()

        if state.turn == Player.GOTE and not args.hot_seat:
            engine.load(random_turn(state, engine.rng, summon_config=engine.config))
            last = engine.state.last_move
            assert last is not None
            print(f"AI plays: ({last.row}, {last.col})")
            print()
            continue

        try:
            command = input("> ")
        except (EOFError, KeyboardInterrupt):
            print("\nGame aborted.")
            return
        try:
            if not _handle_command(engine, command):
                return
        except OutOfRangeError as e:
            print(f"Invalid: {e}")
        except ValueError:
            print("Enter numbers.")
        print()

    # 終局: 結果を表示
    print(format_session(engine.state))
    if engine.state.winner == Player.SENTE:
        print("You win!" if not args.hot_seat else "先手勝利")
    else:
        print("AI wins!" if not args.hot_seat else "後手勝利")


if __name__ == "__main__":
    main()
