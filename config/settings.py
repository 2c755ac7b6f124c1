"""
Django settings

ノードごとの設定はすべて環境変数から読む。
  SERVER_PORT                  このノードの待ち受けポート（8082 なら X を担当）
  OTHER_INSTANCE_PORT          相手ノードのポート
  SYNC_INTERVAL_MILLISECONDS   同期間隔（デフォルト 5000）
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default):
    return os.getenv(name, str(default)).lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-only-tictactoe-node-secret-key')
DEBUG = env_bool('DJANGO_DEBUG', False)
ALLOWED_HOSTS = os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')

INSTALLED_APPS = [
    'daphne',
    'channels',
    'tictactoe',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
]

ROOT_URLCONF = 'config.urls'
ASGI_APPLICATION = 'config.asgi.application'

# 状態はメモリ上のみ（永続化しない）
DATABASES = {}

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer',
    },
}

USE_TZ = True

# --- ノード設定 ---
SERVER_PORT = int(os.getenv('SERVER_PORT', '8080'))
OTHER_INSTANCE_PORT = int(os.getenv('OTHER_INSTANCE_PORT', '8082'))
PEER_HOST = os.getenv('PEER_HOST', 'localhost')
SYNC_INTERVAL_MILLISECONDS = int(os.getenv('SYNC_INTERVAL_MILLISECONDS', '5000'))
# 相手ノードへのリクエストは同期間隔より短く打ち切る
PEER_TIMEOUT_SECONDS = float(os.getenv(
    'PEER_TIMEOUT_SECONDS', min(2.0, SYNC_INTERVAL_MILLISECONDS / 1000)))
SYNC_ENABLED = env_bool('SYNC_ENABLED', True)

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'node': {
            'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'node',
        },
    },
    'loggers': {
        'tictactoe': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
