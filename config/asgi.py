import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter
import tictactoe.routing
from tictactoe.node import start_sync_engine

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": URLRouter(
        tictactoe.routing.websocket_urlpatterns
    ),
})

# サーバー起動時に相手ノードとの同期を始める
start_sync_engine()
