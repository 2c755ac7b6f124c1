"""
三目並べ（Tic Tac Toe）ゲームロジック

ノード間で同期する GameState と、その状態遷移を定義する。
apply_move は純粋関数で、元の状態を書き換えずに新しい状態を返す。
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from tictactoe.exceptions import CellOccupied, GameOver, InvalidRequest, VersionExhausted


class Player(str, Enum):
    """セルの値、および手番・勝者を表す"""

    X = 'X'
    O = 'O'
    EMPTY = 'EMPTY'

    def opposite(self):
        """相手プレイヤー（EMPTY はそのまま）"""
        if self is Player.X:
            return Player.O
        if self is Player.O:
            return Player.X
        return Player.EMPTY


class Cell(str, Enum):
    """3×3のボード上の位置"""

    TL = 'TL'
    TC = 'TC'
    TR = 'TR'
    ML = 'ML'
    MC = 'MC'
    MR = 'MR'
    BL = 'BL'
    BC = 'BC'
    BR = 'BR'

    @classmethod
    def parse(cls, value):
        """
        セル名を Cell に変換

        Args:
            value (str): 'TL' などの識別子、または 'TOP_LEFT' などの別名

        Returns:
            Cell: 対応するセル

        Raises:
            InvalidRequest: 未指定または不明なセル名
        """
        if value is None or str(value).strip() == '':
            raise InvalidRequest("Missing required parameter 'cell'")
        key = str(value).strip().upper()
        if key in cls.__members__:
            return cls[key]
        if key in CELL_ALIASES:
            return CELL_ALIASES[key]
        raise InvalidRequest(f"Invalid cell: {value!r}")


CELL_ALIASES = {
    'TOP_LEFT': Cell.TL,
    'TOP_CENTER': Cell.TC,
    'TOP_RIGHT': Cell.TR,
    'MIDDLE_LEFT': Cell.ML,
    'MIDDLE_CENTER': Cell.MC,
    'MIDDLE_RIGHT': Cell.MR,
    'BOTTOM_LEFT': Cell.BL,
    'BOTTOM_CENTER': Cell.BC,
    'BOTTOM_RIGHT': Cell.BR,
}

# 勝ちパターン（行、列、対角線）
WINNING_LINES = (
    # 行
    (Cell.TL, Cell.TC, Cell.TR),
    (Cell.ML, Cell.MC, Cell.MR),
    (Cell.BL, Cell.BC, Cell.BR),
    # 列
    (Cell.TL, Cell.ML, Cell.BL),
    (Cell.TC, Cell.MC, Cell.BC),
    (Cell.TR, Cell.MR, Cell.BR),
    # 対角線
    (Cell.TL, Cell.MC, Cell.BR),
    (Cell.TR, Cell.MC, Cell.BL),
)

STARTING_PLAYER = Player.X

# version は符号なし64bit
MAX_VERSION = 2 ** 64 - 1


def empty_board():
    """全セルが EMPTY のボード"""
    return {cell: Player.EMPTY for cell in Cell}


@dataclass(frozen=True)
class GameState:
    """
    1ゲーム分の状態

    Attributes:
        board (dict): Cell -> Player（全セルを必ず含む）
        current_player (Player): 次に打つプレイヤー
        last_player (Player): 直前に打ったプレイヤー（初手前は EMPTY）
        game_over (bool): ゲーム終了フラグ
        winner (Player): 勝者（引き分け・進行中は EMPTY）
        version (int): ローカルで変更されるたびに増えるカウンタ
    """

    board: dict = field(default_factory=empty_board)
    current_player: Player = STARTING_PLAYER
    last_player: Player = Player.EMPTY
    game_over: bool = False
    winner: Player = Player.EMPTY
    version: int = 0

    def copy(self):
        """ボードも含めた独立したコピー"""
        return replace(self, board=dict(self.board))

    def count(self, player):
        return sum(1 for value in self.board.values() if value is player)

    def __str__(self):
        text = f"Current Player: {self.current_player.value}\n"
        text += f"Game Over: {self.game_over}\n"
        text += f"Version: {self.version}\n"
        text += "Game Board:" + board_to_display(self.board)
        if self.game_over:
            text += f"Winner: {self.winner.value}\n"
        return text


def new_game(version=0):
    """初期状態（Xから開始、全セル EMPTY）"""
    return GameState(version=version)


def winning_line(board):
    """
    揃っているラインを取得

    Args:
        board (dict): Cell -> Player

    Returns:
        tuple: 揃ったラインのセル（なければNone）
    """
    for line in WINNING_LINES:
        a, b, c = line
        if (board[a] is not Player.EMPTY and
                board[a] == board[b] == board[c]):
            return line
    return None


def find_winner(board):
    """勝者をチェック（'X' / 'O' の Player、またはNone）"""
    line = winning_line(board)
    if line is None:
        return None
    return board[line[0]]


def is_board_full(board):
    """ボードが満杯かチェック"""
    return Player.EMPTY not in board.values()


def apply_move(state, cell):
    """
    現在の手番のプレイヤーが cell に打った後の状態を返す

    Args:
        state (GameState): 現在の状態
        cell (Cell): 打つ位置

    Returns:
        GameState: 新しい状態（version は +1）

    Raises:
        GameOver: ゲームが既に終了している
        CellOccupied: セルが埋まっている
        VersionExhausted: version が MAX_VERSION に達している
    """
    if state.game_over:
        raise GameOver()
    if state.board[cell] is not Player.EMPTY:
        raise CellOccupied()
    if state.version >= MAX_VERSION:
        raise VersionExhausted()

    board = dict(state.board)
    board[cell] = state.current_player

    # 勝敗判定（引き分けより勝ちを優先）
    winner = find_winner(board)
    if winner is not None:
        game_over = True
    elif is_board_full(board):
        game_over, winner = True, Player.EMPTY
    else:
        game_over, winner = False, Player.EMPTY

    return GameState(
        board=board,
        current_player=state.current_player.opposite(),
        last_player=state.current_player,
        game_over=game_over,
        winner=winner,
        version=state.version + 1,
    )


def check_invariants(state):
    """
    状態がルール上到達可能な形かを検証する

    ネットワークから受け取った状態を採用する前に使う。

    Raises:
        InvalidRequest: 不整合があった場合
    """
    def fail(reason):
        raise InvalidRequest(f"Invalid game state: {reason}")

    if set(state.board) != set(Cell):
        fail("board must contain every cell")
    if state.current_player is Player.EMPTY:
        fail("currentPlayer must be X or O")
    if state.version < 0:
        fail("version must not be negative")

    x_count = state.count(Player.X)
    o_count = state.count(Player.O)
    if x_count - o_count not in (0, 1):
        fail("X and O counts are out of balance")

    expected_current = Player.X if x_count == o_count else Player.O
    if state.current_player is not expected_current:
        fail("currentPlayer does not match the board")
    if x_count + o_count == 0:
        if state.last_player is not Player.EMPTY:
            fail("lastPlayer must be EMPTY before any move")
    elif state.last_player is not state.current_player.opposite():
        fail("lastPlayer must differ from currentPlayer")

    winner = find_winner(state.board)
    if state.game_over:
        if winner is not None:
            if state.winner is not winner or state.last_player is not winner:
                fail("winner does not match the winning line")
        elif not is_board_full(state.board):
            fail("game is over without a winning line or a full board")
        elif state.winner is not Player.EMPTY:
            fail("a drawn game has no winner")
    else:
        if winner is not None:
            fail("a winning line exists but the game is not over")
        if is_board_full(state.board):
            fail("the board is full but the game is not over")
        if state.winner is not Player.EMPTY:
            fail("an unfinished game has no winner")


def board_to_display(board):
    """
    ボード状態を表示用フォーマットに変換

    Args:
        board (dict): Cell -> Player

    Returns:
        str: 表示用文字列
    """
    cells = list(Cell)
    display = "\n"
    for i in range(3):
        row = [board[cell] for cell in cells[i*3:(i+1)*3]]
        marks = [' ' if p is Player.EMPTY else p.value for p in row]
        display += f" {marks[0]} | {marks[1]} | {marks[2]} \n"
        if i < 2:
            display += "-----------\n"
    return display
