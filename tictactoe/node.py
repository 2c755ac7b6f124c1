"""
プロセスごとに1つのノード（担当プレイヤー・状態・同期）を組み立てる
"""

import logging
import threading

from django.conf import settings

from tictactoe.game_logic.tictactoe import Player
from tictactoe.peer import PeerClient
from tictactoe.state_holder import StateHolder
from tictactoe.sync import SyncEngine

logger = logging.getLogger(__name__)

# このポートで起動したノードが X を担当する
PLAYER_X_PORT = 8082


def assigned_player_for_port(port):
    return Player.X if int(port) == PLAYER_X_PORT else Player.O


class Node:
    """1ノード分のコンポーネント"""

    def __init__(self, port, peer_host, peer_port, sync_interval, peer_timeout, session=None):
        self.port = port
        self.assigned_player = assigned_player_for_port(port)
        self.holder = StateHolder(self.assigned_player)
        self.peer = PeerClient(peer_host, peer_port, peer_timeout, session=session)
        self.sync_engine = SyncEngine(self.holder, self.peer, sync_interval)
        logger.info(
            "Initialized node on port %s with assigned player %s",
            port, self.assigned_player.value,
        )

    @classmethod
    def from_settings(cls):
        return cls(
            port=settings.SERVER_PORT,
            peer_host=settings.PEER_HOST,
            peer_port=settings.OTHER_INSTANCE_PORT,
            sync_interval=settings.SYNC_INTERVAL_MILLISECONDS / 1000,
            peer_timeout=settings.PEER_TIMEOUT_SECONDS,
        )


_node = None
_node_lock = threading.Lock()


def get_node():
    """現在のノード（未作成なら settings から作る）"""
    global _node
    with _node_lock:
        if _node is None:
            _node = Node.from_settings()
            _node.holder.subscribe(_broadcast_state)
        return _node


def set_node(node):
    """ノードを差し替える（テスト用）。古いノードの同期は止める"""
    global _node
    with _node_lock:
        if _node is not None:
            _node.sync_engine.stop()
        _node = node
        if node is not None:
            node.holder.subscribe(_broadcast_state)


def start_sync_engine():
    """SYNC_ENABLED なら同期スレッドを起動する"""
    node = get_node()
    if settings.SYNC_ENABLED:
        node.sync_engine.start()
    else:
        logger.info("Sync engine disabled by settings")
    return node


def _broadcast_state(state):
    # 循環importを避けるためここで読み込む
    from tictactoe.consumers import broadcast_state
    broadcast_state(state)
