import json
from contextlib import contextmanager
from urllib.parse import urlsplit

import pytest
import requests
from django.test import Client

import tictactoe.node as node_module
from tictactoe.game_logic.tictactoe import Cell, apply_move, new_game
from tictactoe.node import Node, set_node

X_PORT = 8082
O_PORT = 8080


class StubResponse:
    """requests.Response の代わり"""

    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise requests.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class StubSession:
    """
    呼び出しを記録し、用意したレスポンス（または例外）を順に返す

    responses が空になったら最後のものを返し続ける。
    """

    def __init__(self, *responses):
        self.responses = list(responses) or [StubResponse(200)]
        self.calls = []

    def request(self, method, url, timeout=None, json=None):
        self.calls.append({'method': method, 'url': url, 'json': json, 'timeout': timeout})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def calls_for(self, method):
        return [call for call in self.calls if call['method'] == method]


@contextmanager
def using_node(node):
    """ビューが参照するノードを一時的に切り替える"""
    previous = node_module._node
    node_module._node = node
    try:
        yield node
    finally:
        node_module._node = previous


class RoutedSession:
    """PeerClient から相手ノードのビューを Django test client で直接呼ぶ"""

    def __init__(self):
        self.nodes = {}

    def request(self, method, url, timeout=None, json=None):
        parts = urlsplit(url)
        path = parts.path
        body = '' if json is None else _dumps(json)
        with using_node(self.nodes[parts.port]):
            response = Client().generic(method, path, data=body, content_type='application/json')
        payload = None
        if response.get('Content-Type', '').startswith('application/json'):
            payload = response.json()
        return StubResponse(response.status_code, payload, response.content.decode())


def _dumps(data):
    return json.dumps(data)


def make_node(port, peer_port, session):
    return Node(
        port=port,
        peer_host='localhost',
        peer_port=peer_port,
        sync_interval=5.0,
        peer_timeout=1.0,
        session=session,
    )


class NodePair:
    """同一プロセス内の X ノードと O ノード"""

    def __init__(self):
        self.session = RoutedSession()
        self.x = make_node(X_PORT, O_PORT, self.session)
        self.o = make_node(O_PORT, X_PORT, self.session)
        self.session.nodes = {X_PORT: self.x, O_PORT: self.o}
        self.client = Client()

    def move(self, node, cell):
        """node に手を送り、その後 node の同期を1回実行する"""
        with using_node(node):
            response = self.client.post(f'/api/game/move?cell={cell}')
        node.sync_engine.tick()
        return response

    def reset(self, node):
        with using_node(node):
            response = self.client.post('/api/game/reset')
        node.sync_engine.tick()
        return response

    def state(self, node):
        with using_node(node):
            return self.client.get('/api/game/state').json()


@pytest.fixture
def peer_session():
    return StubSession()


@pytest.fixture
def node(peer_session):
    """X を担当するノード（相手ノードはスタブ）"""
    node = make_node(X_PORT, O_PORT, peer_session)
    set_node(node)
    yield node
    set_node(None)


@pytest.fixture
def pair():
    return NodePair()


def play(*cells, state=None):
    """new_game() から順に手を打った状態"""
    state = state or new_game()
    for cell in cells:
        state = apply_move(state, Cell(cell))
    return state
