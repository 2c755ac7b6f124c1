"""
ノードが持つ唯一のゲーム状態

ローカルの手、相手ノードからの状態、リセットによる変更を
1つのロックで直列化する。読み出しは常に完全な状態のコピーを返す。

リセットも version を進めるので、リセットが相手に届く前に
相手の古い状態で上書きされることはない。
"""

import enum
import logging
import threading
from collections import namedtuple

from tictactoe.exceptions import NotYourTurn
from tictactoe.game_logic.tictactoe import MAX_VERSION, apply_move, board_to_display, new_game

logger = logging.getLogger(__name__)

NEWER_STATE_RECEIVED_MESSAGE = "Received newer state from other instance. Updating local state."
LOCAL_STATE_NEWER_MESSAGE = "Local state is newer. Sending update to other instance."
INCONSISTENT_STATE_MESSAGE = "Inconsistent state detected."


class SyncAction(enum.Enum):
    ADOPT = 'adopt'
    PUSH = 'push'
    NOOP = 'noop'
    INCONSISTENT = 'inconsistent'


# state: ADOPT なら採用後の状態、PUSH なら相手に送るローカル状態
SyncOutcome = namedtuple('SyncOutcome', ['action', 'state'])


class StateHolder:
    """
    現在の GameState を保持する

    Attributes:
        assigned_player (Player): このノードが手を打てるプレイヤー
    """

    def __init__(self, assigned_player, initial_state=None):
        self.assigned_player = assigned_player
        self._state = initial_state if initial_state is not None else new_game()
        self._lock = threading.Lock()
        self._listeners = []
        # 確定ごとに増える通し番号。通知の順序付けに使う
        self._commit_seq = 0
        self._notify_lock = threading.Lock()
        self._notified_seq = 0

    def subscribe(self, listener):
        """状態が変わるたびに listener(state) を呼ぶ"""
        self._listeners.append(listener)

    def _commit(self, state):
        """ロック内で呼ぶ。確定した状態のコピーと通し番号を返す"""
        self._state = state
        self._commit_seq += 1
        return self._state.copy(), self._commit_seq

    def _notify(self, state, seq):
        """
        listener を確定順に呼ぶ

        後から確定した状態の通知が先に済んでいれば、古い状態は捨てる。
        """
        with self._notify_lock:
            if seq <= self._notified_seq:
                logger.debug("Skipping stale notification for version %s", state.version)
                return
            self._notified_seq = seq
            for listener in list(self._listeners):
                try:
                    listener(state)
                except Exception:
                    logger.exception("State listener %r failed", listener)

    def get(self):
        """現在の状態のコピー"""
        with self._lock:
            return self._state.copy()

    def try_apply_local_move(self, cell):
        """
        ローカルの手を適用する

        Args:
            cell (Cell): 打つ位置

        Returns:
            GameState: 適用後の状態

        Raises:
            NotYourTurn: 担当プレイヤーの手番ではない
            GameOver, CellOccupied, VersionExhausted: apply_move から
        """
        with self._lock:
            current = self._state
            if current.current_player is not self.assigned_player:
                logger.warning(
                    "Attempted move out of turn. Current player: %s, Assigned player: %s",
                    current.current_player.value, self.assigned_player.value,
                )
                raise NotYourTurn()
            updated, seq = self._commit(apply_move(current, cell))
        logger.info(
            "Move made at %s by %s. New current player: %s",
            cell.value, self.assigned_player.value, updated.current_player.value,
        )
        logger.debug("Board after move:%s", board_to_display(updated.board))
        self._notify(updated, seq)
        return updated.copy()

    def reconcile(self, peer_state):
        """
        相手ノードの状態とバージョンを比べて、採用・送信・警告のどれかを決める

        比較は呼び出し時点の最新のローカル状態に対して行う。

        Args:
            peer_state (GameState): 相手ノードから取得した状態

        Returns:
            SyncOutcome: 実行したアクション
        """
        seq = None
        with self._lock:
            local = self._state
            if peer_state.version > local.version:
                adopted, seq = self._commit(peer_state.copy())
                outcome = SyncOutcome(SyncAction.ADOPT, adopted)
            elif peer_state.version < local.version:
                outcome = SyncOutcome(SyncAction.PUSH, local.copy())
            elif peer_state == local:
                outcome = SyncOutcome(SyncAction.NOOP, None)
            else:
                outcome = SyncOutcome(SyncAction.INCONSISTENT, None)

        if outcome.action is SyncAction.ADOPT:
            logger.info(NEWER_STATE_RECEIVED_MESSAGE)
            self._notify(outcome.state, seq)
        elif outcome.action is SyncAction.PUSH:
            logger.info(LOCAL_STATE_NEWER_MESSAGE)
        elif outcome.action is SyncAction.INCONSISTENT:
            logger.warning(
                "%s Local version %s, peer version %s",
                INCONSISTENT_STATE_MESSAGE, local.version, peer_state.version,
            )
        return outcome

    def replace(self, new_state):
        """
        new_state のバージョンが新しい場合のみ置き換える

        Returns:
            bool: 置き換えた場合True
        """
        with self._lock:
            if new_state.version <= self._state.version:
                return False
            committed, seq = self._commit(new_state.copy())
        self._notify(committed, seq)
        return True

    def reset(self):
        """
        初期盤面に戻す

        version は現在の version +1。新しい相手の状態は常に採用しているので、
        これで相手ノードが持つどの状態よりも新しくなる。MAX_VERSION を超える場合だけ 0 からやり直す。

        Returns:
            GameState: リセット後の状態
        """
        with self._lock:
            version = self._state.version + 1
            if version > MAX_VERSION:
                logger.warning("Version counter exhausted; restarting from version 0")
                version = 0
            fresh, seq = self._commit(new_game(version=version))
        logger.info(
            "Game initialized with currentPlayer: %s (version %s)",
            fresh.current_player.value, fresh.version,
        )
        self._notify(fresh, seq)
        return fresh
