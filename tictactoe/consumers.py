import asyncio
import json
import logging

from asgiref.sync import async_to_sync, sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from channels.layers import get_channel_layer

from tictactoe.game_logic.game_utils import state_to_dict
from tictactoe.node import get_node

logger = logging.getLogger(__name__)

GAME_STATE_GROUP = 'game_state'
BROADCAST_TIMEOUT_SECONDS = 5

# コンシューマが動いているイベントループ（最初の接続で記録する）
_server_loop = None


def remember_server_loop(loop):
    global _server_loop
    _server_loop = loop


def _running_loop():
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def broadcast_state(state):
    """
    確定した状態を観戦中の全クライアントに送る（同期コードから呼ぶ）

    InMemoryChannelLayer の受信側はサーバーのイベントループで待っているので、
    別スレッドからの送信もそのループ上で実行する。
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    message = {'type': 'game_update_event', 'state': state_to_dict(state)}

    loop = _server_loop
    if loop is not None and not loop.is_closed() and loop.is_running():
        if _running_loop() is loop:
            loop.create_task(channel_layer.group_send(GAME_STATE_GROUP, message))
            return
        future = asyncio.run_coroutine_threadsafe(channel_layer.group_send(GAME_STATE_GROUP, message), loop)
        future.result(timeout=BROADCAST_TIMEOUT_SECONDS)
        return

    async_to_sync(channel_layer.group_send)(GAME_STATE_GROUP, message)


# --- 盤面のライブ配信 (読み取り専用) ---
class GameStateConsumer(AsyncWebsocketConsumer):
    async def connect(self):
        remember_server_loop(asyncio.get_running_loop())
        await self.channel_layer.group_add(GAME_STATE_GROUP, self.channel_name)
        await self.accept()

        # 接続直後に現在の状態を送る
        state = await sync_to_async(lambda: get_node().holder.get())()
        await self.send_state(state_to_dict(state))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(GAME_STATE_GROUP, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        # 手はHTTP APIからのみ受け付ける
        logger.debug("Ignoring websocket message on the state feed")

    async def game_update_event(self, event):
        await self.send_state(event['state'])

    async def send_state(self, state):
        await self.send(text_data=json.dumps({
            'type': 'game_state',
            'state': state,
        }))
