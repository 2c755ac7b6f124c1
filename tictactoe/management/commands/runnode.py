from django.conf import settings
from django.core.management import call_command
from django.core.management.base import BaseCommand

from tictactoe.node import assigned_player_for_port


class Command(BaseCommand):
    help = "SERVER_PORT でノードを起動する（8082 なら X、それ以外は O）"

    def add_arguments(self, parser):
        parser.add_argument('--host', default='0.0.0.0')

    def handle(self, *args, **options):
        port = settings.SERVER_PORT
        self.stdout.write(
            f"Starting node as player {assigned_player_for_port(port).value} on port {port}, "
            f"peer port {settings.OTHER_INSTANCE_PORT}"
        )
        # 状態はメモリ上のみなので自動リロードは使わない
        call_command('runserver', f"{options['host']}:{port}", use_reloader=False)
