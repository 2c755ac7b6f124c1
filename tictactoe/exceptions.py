"""
ゲームAPIのエラー種別

views.handle_game_errors がここで定義した status_code をそのまま
HTTPステータスに変換する。
"""


class GameError(Exception):
    """呼び出し元に返すエラーの基底クラス"""

    status_code = 400
    default_message = 'Invalid request'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotYourTurn(GameError):
    """このノードの担当プレイヤーの手番ではない"""

    default_message = "It's not your turn."


class CellOccupied(GameError):
    default_message = 'Cell is already occupied.'


class GameOver(GameError):
    default_message = 'Game is already over.'


class VersionExhausted(GameError):
    """version が上限に達していてこれ以上進められない"""

    default_message = "Version counter is exhausted. Reset the game."


class InvalidRequest(GameError):
    """セル名やJSONボディが解釈できない"""

    default_message = 'Invalid request'


class PeerError(Exception):
    """相手ノードとの通信に失敗した（呼び出し元には返さない）"""
