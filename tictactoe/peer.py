"""
相手ノードへのHTTPクライアント
"""

import logging

import requests

from tictactoe.exceptions import InvalidRequest, PeerError
from tictactoe.game_logic.game_utils import state_from_dict, state_to_dict

logger = logging.getLogger(__name__)

OTHER_INSTANCE_URL_FORMAT = "http://{host}:{port}/api/game"


class PeerClient:
    """
    相手ノードの /api/game/state を呼ぶ

    失敗はすべて PeerError に包んで送出する。
    """

    def __init__(self, host, port, timeout, session=None):
        self.base_url = OTHER_INSTANCE_URL_FORMAT.format(host=host, port=port)
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def state_url(self):
        return f"{self.base_url}/state"

    def _request(self, method, url, **kwargs):
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            raise PeerError(f"{method} {url} failed: {e}") from e
        return response

    def fetch_state(self):
        """相手ノードの現在の状態を取得"""
        response = self._request('GET', self.state_url)
        try:
            return state_from_dict(response.json())
        except ValueError as e:
            raise PeerError(f"Undecodable state from {self.state_url}: {e}") from e
        except InvalidRequest as e:
            raise PeerError(f"Rejected state from {self.state_url}: {e.message}") from e

    def push_state(self, state):
        """ローカルの状態を相手ノードに送る"""
        self._request('POST', self.state_url, json=state_to_dict(state))
        logger.debug("Pushed version %s to %s", state.version, self.state_url)
