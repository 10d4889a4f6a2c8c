"""Types and constants for 召喚将棋 (Summon Shogi, 9x9).

召喚将棋（9×9盤）の基本型・定数定義。
駒は14種類（未成7種 + 成り6種 + 王将）。先手の玉と後手の王は同じ KING で、
所有者によって区別する。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique

from summon_shogi.game.errors import OutOfRangeError

ROWS = 9
COLS = 9
NUM_SQUARES = ROWS * COLS  # 81マス


@unique
class Player(IntEnum):
    """Player identifiers.

    先手（SENTE = プレイヤー）は下側から上に向かって進む（row 8 → row 0）。
    後手（GOTE = 相手）は上側から下に向かって進む（row 0 → row 8）。
    """

    SENTE = 0  # 先手
    GOTE = 1   # 後手

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。"""
        return Player(1 - self.value)

    @property
    def forward(self) -> int:
        """前方向の行の増分（先手は -1、後手は +1）。"""
        return -1 if self == Player.SENTE else 1


@unique
class PieceType(IntEnum):
    """Piece types in 召喚将棋（14種類）.

    値は to_tensor_planes() でのチャンネルインデックスに対応する。
    0〜6: 未成駒、7: 王将、8〜13: 成り駒
    """

    PAWN = 0         # 歩
    LANCE = 1        # 香
    KNIGHT = 2       # 桂
    SILVER = 3       # 銀
    GOLD = 4         # 金
    BISHOP = 5       # 角
    ROOK = 6         # 飛
    KING = 7         # 玉/王
    PRO_PAWN = 8     # と
    PRO_LANCE = 9    # 杏（成香）
    PRO_KNIGHT = 10  # 圭（成桂）
    PRO_SILVER = 11  # 全（成銀）
    HORSE = 12       # 馬（成り角）
    DRAGON = 13      # 竜（成り飛）


@dataclass(frozen=True, order=True)
class Square:
    """A board coordinate (row, col).

    盤上のマス座標。生成時に範囲チェックを行うため、Square が存在すれば
    必ず盤内を指している。row 0 が後手の後段、row 8 が先手の後段。
    """

    row: int
    col: int

    def __post_init__(self) -> None:
        if not (0 <= self.row < ROWS and 0 <= self.col < COLS):
            msg = f"Square out of range: ({self.row}, {self.col})"
            raise OutOfRangeError(msg)

    @property
    def index(self) -> int:
        """行優先のマスインデックス（row * 9 + col）。"""
        return self.row * COLS + self.col

    @classmethod
    def from_index(cls, idx: int) -> Square:
        if not 0 <= idx < NUM_SQUARES:
            raise OutOfRangeError(f"Square index out of range: {idx}")
        return cls(idx // COLS, idx % COLS)

    def offset(self, dr: int, dc: int) -> Square | None:
        """(dr, dc) だけずらしたマスを返す。盤外なら None。"""
        r, c = self.row + dr, self.col + dc
        if 0 <= r < ROWS and 0 <= c < COLS:
            return Square(r, c)
        return None


# 成り変換テーブル: 未成駒 → 成り駒（金・玉は成れない）
PROMOTION_MAP: dict[PieceType, PieceType] = {
    PieceType.PAWN: PieceType.PRO_PAWN,
    PieceType.LANCE: PieceType.PRO_LANCE,
    PieceType.KNIGHT: PieceType.PRO_KNIGHT,
    PieceType.SILVER: PieceType.PRO_SILVER,
    PieceType.BISHOP: PieceType.HORSE,
    PieceType.ROOK: PieceType.DRAGON,
}

# 逆変換: 成り駒 → 元の駒種（取られた駒を持ち駒に戻す際に使用）
UNPROMOTION_MAP: dict[PieceType, PieceType] = {v: k for k, v in PROMOTION_MAP.items()}

# 召喚・持ち駒になりうる駒種（未成の非玉駒、7種）
HAND_PIECE_TYPES = [
    PieceType.PAWN, PieceType.LANCE, PieceType.KNIGHT,
    PieceType.SILVER, PieceType.GOLD, PieceType.BISHOP, PieceType.ROOK,
]

_GOLD_STEPS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, 0)]

# 1マス移動の方向定義（先手視点、前 = 行インデックス減少方向）
# 後手の場合は行方向を反転して使う
STEP_MOVES: dict[PieceType, list[tuple[int, int]]] = {
    PieceType.PAWN: [(-1, 0)],  # 歩: 1マス前のみ
    PieceType.SILVER: [(-1, -1), (-1, 0), (-1, 1), (1, -1), (1, 1)],  # 銀: 前3方向+斜め後
    PieceType.GOLD: _GOLD_STEPS,  # 金: 6方向
    PieceType.KING: [
        (-1, -1), (-1, 0), (-1, 1),
        (0, -1), (0, 1),
        (1, -1), (1, 0), (1, 1),
    ],  # 王: 全8方向1マス
    # 成り駒（馬・竜以外）は金と同じ動き
    PieceType.PRO_PAWN: _GOLD_STEPS,
    PieceType.PRO_LANCE: _GOLD_STEPS,
    PieceType.PRO_KNIGHT: _GOLD_STEPS,
    PieceType.PRO_SILVER: _GOLD_STEPS,
    # 馬・竜は後ろ向きの3マスだけ1マス移動を追加する（召喚将棋独自の非対称ルール）
    PieceType.HORSE: [(1, -1), (1, 0), (1, 1)],
    PieceType.DRAGON: [(1, -1), (1, 0), (1, 1)],
}

# 桂馬のジャンプ（2マス前+左右1マス、途中の駒を飛び越える）
KNIGHT_MOVES: list[tuple[int, int]] = [(-2, -1), (-2, 1)]

# 遠距離移動の方向定義（同方向に繰り返し移動できる）
SLIDE_MOVES: dict[PieceType, list[tuple[int, int]]] = {
    PieceType.LANCE: [(-1, 0)],                              # 香: 前方向のみ
    PieceType.BISHOP: [(-1, -1), (-1, 1), (1, -1), (1, 1)], # 角: 斜め4方向
    PieceType.ROOK: [(-1, 0), (1, 0), (0, -1), (0, 1)],     # 飛: 縦横4方向
    PieceType.HORSE: [(-1, -1), (-1, 1), (1, -1), (1, 1)],   # 馬: 斜め遠距離
    PieceType.DRAGON: [(-1, 0), (1, 0), (0, -1), (0, 1)],    # 竜: 縦横遠距離
}

# 成りゾーン（敵陣3段）
PROMOTION_ZONE: dict[Player, range] = {
    Player.SENTE: range(0, 3),
    Player.GOTE: range(6, 9),
}

# 初期配置の玉の位置
KING_HOME: dict[Player, tuple[int, int]] = {
    Player.SENTE: (8, 4),
    Player.GOTE: (0, 4),
}
