"""
ゲーム状態のシリアライズ

ノード間でやり取りする GameState JSON のフィールド名と形はここで決める。
"""

import json

from tictactoe.exceptions import InvalidRequest

from .tictactoe import MAX_VERSION, Cell, GameState, Player, check_invariants


def state_to_dict(state):
    """
    GameState をJSON送信用の辞書に変換

    Args:
        state (GameState): ゲーム状態

    Returns:
        dict: {'board', 'currentPlayer', 'lastPlayer', 'gameOver', 'winner', 'version'}
    """
    return {
        'board': {cell.value: state.board[cell].value for cell in Cell},
        'currentPlayer': state.current_player.value,
        'lastPlayer': state.last_player.value,
        'gameOver': state.game_over,
        'winner': state.winner.value,
        'version': state.version,
    }


def _player(data, key):
    value = data.get(key)
    try:
        return Player(value)
    except ValueError:
        raise InvalidRequest(f"Invalid game state: {key} must be one of X, O, EMPTY")


def state_from_dict(data, validate=True):
    """
    受け取った辞書を GameState に変換

    Args:
        data (dict): GameState JSON をパースしたもの
        validate (bool): check_invariants も行うか

    Returns:
        GameState: 変換結果

    Raises:
        InvalidRequest: 形式が不正、または状態として不整合
    """
    if not isinstance(data, dict):
        raise InvalidRequest("Invalid game state: expected a JSON object")

    missing = [key for key in ('board', 'currentPlayer', 'lastPlayer', 'gameOver', 'winner', 'version')
               if key not in data]
    if missing:
        raise InvalidRequest(f"Invalid game state: missing {', '.join(missing)}")

    raw_board = data['board']
    if not isinstance(raw_board, dict):
        raise InvalidRequest("Invalid game state: board must be an object")
    board = {}
    for key, value in raw_board.items():
        try:
            cell = Cell(key)
        except ValueError:
            raise InvalidRequest(f"Invalid game state: unknown cell {key!r}")
        try:
            board[cell] = Player(value)
        except ValueError:
            raise InvalidRequest(f"Invalid game state: bad value for {key}")
    if len(board) != len(Cell):
        raise InvalidRequest("Invalid game state: board must contain every cell")

    game_over = data['gameOver']
    if not isinstance(game_over, bool):
        raise InvalidRequest("Invalid game state: gameOver must be a boolean")

    version = data['version']
    # bool は int のサブクラスなので除外
    if isinstance(version, bool) or not isinstance(version, int) or not 0 <= version <= MAX_VERSION:
        raise InvalidRequest("Invalid game state: version must be an unsigned 64-bit integer")

    state = GameState(
        board=board,
        current_player=_player(data, 'currentPlayer'),
        last_player=_player(data, 'lastPlayer'),
        game_over=game_over,
        winner=_player(data, 'winner'),
        version=version,
    )
    if validate:
        check_invariants(state)
    return state


def serialize_game_data(state):
    """
    ゲーム状態をJSON文字列にシリアライズ

    Args:
        state (GameState): ゲーム状態

    Returns:
        str: JSON文字列
    """
    return json.dumps(state_to_dict(state), ensure_ascii=False)


def deserialize_game_data(json_str):
    """
    JSON文字列をゲーム状態に逆シリアライズ

    Args:
        json_str (str | bytes): JSON文字列

    Returns:
        GameState: ゲーム状態
    """
    try:
        data = json.loads(json_str)
    except (TypeError, ValueError) as e:
        raise InvalidRequest(f"Invalid game state: malformed JSON ({e})")
    return state_from_dict(data)
