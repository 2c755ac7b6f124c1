"""
2ノード間のシナリオテスト

各ノードの同期は手を打った直後に1回ずつ実行する（SyncEngine.tick）。
最初のリセットで version は 1 になる。
"""
import requests

from tictactoe.game_logic.game_utils import state_to_dict
from tictactoe.game_logic.tictactoe import Player, new_game

from .conftest import O_PORT, X_PORT, make_node, using_node


def play_top_row_win(pair):
    pair.reset(pair.x)
    pair.move(pair.x, 'TL')
    pair.move(pair.o, 'MC')
    pair.move(pair.x, 'TC')
    pair.move(pair.o, 'ML')
    return pair.move(pair.x, 'TR')


def test_assigned_players(pair):
    assert pair.x.assigned_player is Player.X
    assert pair.o.assigned_player is Player.O


def test_top_row_win(pair):
    response = play_top_row_win(pair)
    assert response.content.decode() == "Move successful. Player X wins!"

    state = pair.state(pair.x)
    assert state['gameOver'] is True
    assert state['winner'] == 'X'
    assert state['version'] == 6
    assert state['board'] == {
        'TL': 'X', 'TC': 'X', 'TR': 'X',
        'ML': 'O', 'MC': 'O', 'MR': 'EMPTY',
        'BL': 'EMPTY', 'BC': 'EMPTY', 'BR': 'EMPTY',
    }
    assert pair.state(pair.o) == state


def test_draw(pair):
    pair.reset(pair.x)
    for node, cell in zip([pair.x, pair.o] * 5,
                          ['TL', 'TC', 'TR', 'ML', 'MR', 'MC', 'BL', 'BR', 'BC']):
        response = pair.move(node, cell)
        assert response.status_code == 200
    assert response.content.decode() == "Move successful. The game is a draw!"

    state = pair.state(pair.o)
    assert state['gameOver'] is True
    assert state['winner'] == 'EMPTY'
    assert state['version'] == 10
    assert 'EMPTY' not in state['board'].values()


def test_diagonal_win(pair):
    pair.reset(pair.x)
    pair.move(pair.x, 'TL')
    pair.move(pair.o, 'TC')
    pair.move(pair.x, 'MC')
    pair.move(pair.o, 'ML')
    pair.move(pair.x, 'BR')

    state = pair.state(pair.x)
    assert state['gameOver'] is True
    assert state['winner'] == 'X'
    assert state['version'] == 6


def test_cell_occupied_across_nodes(pair):
    pair.reset(pair.x)
    pair.move(pair.x, 'TL')
    before = pair.state(pair.o)

    response = pair.move(pair.o, 'TL')
    assert response.status_code == 400
    assert "occupied" in response.content.decode()
    assert pair.state(pair.o) == before
    assert before['version'] == 2


def test_out_of_turn(pair):
    pair.reset(pair.x)
    pair.move(pair.x, 'TL')
    response = pair.move(pair.x, 'TC')
    assert response.status_code == 400
    assert "not your turn" in response.content.decode()


def test_move_after_game_over(pair):
    play_top_row_win(pair)
    response = pair.move(pair.o, 'BL')
    assert response.status_code == 400
    assert "Game is already over" in response.content.decode()


def test_reset_during_play_propagates(pair):
    pair.reset(pair.x)
    pair.move(pair.x, 'TL')
    pair.move(pair.o, 'MC')
    assert pair.state(pair.o)['version'] == 3

    pair.reset(pair.x)
    # 次の同期でも巻き戻らない
    pair.x.sync_engine.tick()
    pair.o.sync_engine.tick()

    expected = state_to_dict(new_game(version=4))
    assert pair.state(pair.o) == expected
    assert pair.state(pair.x) == expected


def test_reset_survives_peer_syncing_first(pair):
    pair.move(pair.x, 'TL')
    pair.move(pair.o, 'MC')

    # X でリセットした直後、X の同期より先に O が同期する
    with using_node(pair.x):
        assert pair.client.post('/api/game/reset').status_code == 200
    pair.o.sync_engine.tick()
    pair.x.sync_engine.tick()
    pair.o.sync_engine.tick()

    expected = state_to_dict(new_game(version=3))
    assert pair.state(pair.x) == expected
    assert pair.state(pair.o) == expected

    # リセット後の初手は X から
    assert pair.move(pair.x, 'TL').status_code == 200
    assert pair.state(pair.o)['version'] == 4


def test_reset_from_o_node(pair):
    pair.move(pair.x, 'TL')
    pair.reset(pair.o)
    assert pair.state(pair.x) == state_to_dict(new_game(version=2))


def test_restarted_peer_catches_up_through_push(pair):
    pair.move(pair.x, 'TL')
    pair.move(pair.o, 'MC')
    # O ノードが再起動して初期状態に戻った
    pair.o = make_node(O_PORT, X_PORT, pair.session)
    pair.session.nodes[O_PORT] = pair.o
    pair.x.sync_engine.tick()
    assert pair.state(pair.o) == pair.state(pair.x)
    assert pair.state(pair.o)['version'] == 2


def test_unreachable_peer_does_not_block_moves(pair):
    # どちらのノードにも届かない
    def unreachable(method, url, **kwargs):
        raise requests.ConnectionError("connection refused")
    pair.session.request = unreachable

    response = pair.move(pair.x, 'TL')
    assert response.status_code == 200
    assert pair.state(pair.x)['version'] == 1
    assert pair.state(pair.o)['version'] == 0
