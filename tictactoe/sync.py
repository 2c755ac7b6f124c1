"""
相手ノードとの定期同期

一定間隔で相手の状態を取得し、StateHolder.reconcile の結果に応じて
ローカル状態を相手に送り返す。通信中はロックを持たない。
"""

import logging
import threading

from tictactoe.exceptions import PeerError
from tictactoe.state_holder import SyncAction

logger = logging.getLogger(__name__)

SYNC_ERROR_MESSAGE = "Error during state synchronization"


class SyncEngine:
    """
    同期スレッド

    Args:
        holder (StateHolder): ローカル状態
        peer (PeerClient): 相手ノード
        interval (float): 同期間隔（秒）
    """

    def __init__(self, holder, peer, interval):
        self.holder = holder
        self.peer = peer
        self.interval = interval
        self._wakeup = threading.Event()
        self._stopped = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stopped.clear()
        self._thread = threading.Thread(target=self._run, name='tictactoe-sync', daemon=True)
        self._thread.start()
        logger.info("Sync engine started (every %.3fs against %s)", self.interval, self.peer.state_url)

    def stop(self):
        self._stopped.set()
        self._wakeup.set()

    def trigger(self):
        """次の同期を待たずにすぐ実行する"""
        self._wakeup.set()

    def _run(self):
        while not self._stopped.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception(SYNC_ERROR_MESSAGE)
            self._wakeup.wait(self.interval)
            self._wakeup.clear()

    def tick(self):
        """
        1回分の同期

        Returns:
            SyncOutcome: reconcile の結果（取得に失敗した場合はNone）
        """
        try:
            peer_state = self.peer.fetch_state()
        except PeerError as e:
            logger.error("%s: %s", SYNC_ERROR_MESSAGE, e)
            return None

        outcome = self.holder.reconcile(peer_state)
        if outcome.action is SyncAction.PUSH:
            try:
                self.peer.push_state(outcome.state)
            except PeerError as e:
                logger.error("Failed to push local state to other instance: %s", e)
        return outcome
