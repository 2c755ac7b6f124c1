from django.apps import AppConfig


class TictactoeConfig(AppConfig):
    name = 'tictactoe'
    verbose_name = 'Tic Tac Toe replica node'
