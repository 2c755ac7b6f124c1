from io import StringIO

import pytest
from django.core.management import call_command

import tictactoe.management.commands.runnode as runnode
from tictactoe.game_logic.tictactoe import Player
from tictactoe.node import assigned_player_for_port, get_node, set_node, start_sync_engine


@pytest.fixture
def fresh_node():
    set_node(None)
    yield
    set_node(None)


@pytest.mark.parametrize("port,player", [(8082, Player.X), ('8082', Player.X), (8080, Player.O), (9000, Player.O)])
def test_assigned_player_for_port(port, player):
    assert assigned_player_for_port(port) is player


def test_get_node_reads_settings(settings, fresh_node):
    settings.SERVER_PORT = 8082
    settings.OTHER_INSTANCE_PORT = 8090
    settings.PEER_HOST = 'peer.local'
    settings.SYNC_INTERVAL_MILLISECONDS = 250
    settings.PEER_TIMEOUT_SECONDS = 0.2

    node = get_node()
    assert node is get_node()
    assert node.assigned_player is Player.X
    assert node.peer.state_url == 'http://peer.local:8090/api/game/state'
    assert node.peer.timeout == 0.2
    assert node.sync_engine.interval == 0.25


def test_sync_can_be_disabled(settings, fresh_node):
    settings.SYNC_ENABLED = False
    node = start_sync_engine()
    assert not node.sync_engine.running


def test_runnode_serves_on_configured_port(settings, monkeypatch):
    settings.SERVER_PORT = 8082
    settings.OTHER_INSTANCE_PORT = 8080
    calls = []
    monkeypatch.setattr(runnode, 'call_command', lambda *args, **kwargs: calls.append((args, kwargs)))

    out = StringIO()
    call_command('runnode', stdout=out)
    assert calls == [(('runserver', '0.0.0.0:8082'), {'use_reloader': False})]
    assert "player X on port 8082" in out.getvalue()
