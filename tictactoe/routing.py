from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # 盤面のライブ配信
    re_path(r'ws/game/state/$', consumers.GameStateConsumer.as_asgi()),
]
