from django.urls import path
from . import views

urlpatterns = [
    path('move', views.make_move, name='game_move'),
    path('reset', views.reset_game, name='game_reset'),
    path('state', views.game_state, name='game_state'),
]
