"""
/api/game 以下のHTTP API

ビジネスロジックは持たず、StateHolder の呼び出しとエラー種別から
ステータスコードへの変換だけを行う。
"""

import functools
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from tictactoe.exceptions import GameError
from tictactoe.game_logic.game_utils import deserialize_game_data, state_to_dict
from tictactoe.game_logic.tictactoe import Cell, Player
from tictactoe.node import get_node

logger = logging.getLogger(__name__)


def text_response(message, status=200):
    return HttpResponse(message, status=status, content_type='text/plain; charset=utf-8')


def handle_game_errors(failure_message):
    """GameError は status_code で、それ以外は500で返す"""
    def decorator(view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                return view(request, *args, **kwargs)
            except GameError as e:
                logger.warning("Rejected %s %s: %s", request.method, request.path, e.message)
                return text_response(e.message, status=e.status_code)
            except Exception:
                logger.exception("Unexpected error during %s %s", request.method, request.path)
                return text_response(failure_message, status=500)
        return wrapper
    return decorator


def move_result_message(state):
    """手を打った後のレスポンスメッセージ"""
    if not state.game_over:
        return "Move successful"
    if state.winner is Player.EMPTY:
        return "Move successful. The game is a draw!"
    return f"Move successful. Player {state.winner.value} wins!"


@csrf_exempt
@require_POST
@handle_game_errors("An unexpected error occurred")
def make_move(request):
    """担当プレイヤーとして cell に打つ"""
    cell = Cell.parse(request.GET.get('cell'))
    logger.info("Received move request for cell: %s", cell.value)

    node = get_node()
    state = node.holder.try_apply_local_move(cell)
    # 相手ノードにすぐ反映させる
    node.sync_engine.trigger()

    if state.game_over:
        if state.winner is Player.EMPTY:
            logger.info("Game over. It's a draw.")
        else:
            logger.info("Game over. Player %s wins.", state.winner.value)
    return text_response(move_result_message(state))


@csrf_exempt
@require_POST
@handle_game_errors("Failed to reset the game")
def reset_game(request):
    """ゲームをリセット（相手ノードには次の同期で伝わる）"""
    logger.info("Received request to reset the game")

    node = get_node()
    node.holder.reset()
    node.sync_engine.trigger()
    return text_response("Game has been reset")


@csrf_exempt
@require_http_methods(["GET", "POST"])
def game_state(request):
    if request.method == 'POST':
        return update_game_state(request)
    return get_game_state(request)


def get_game_state(request):
    try:
        state = get_node().holder.get()
    except Exception:
        logger.exception("Error occurred while retrieving game state")
        return HttpResponse(status=500)
    return JsonResponse(state_to_dict(state))


@handle_game_errors("Failed to update game state")
def update_game_state(request):
    """相手ノードからの状態（バージョンが新しい場合のみ採用）"""
    new_state = deserialize_game_data(request.body)
    committed = get_node().holder.replace(new_state)
    if committed:
        logger.info("Game state updated to version %s", new_state.version)
    else:
        logger.debug("Ignored game state with version %s", new_state.version)
    return text_response("Game state updated successfully")
