"""Process entry point: admin server bootstrap, then the HTTP API."""

import atexit
import logging
import sys

from userapi import create_app
from userapi.admin import bootstrap
from userapi.config import settings
from userapi.exceptions import BootstrapError

logger = logging.getLogger(__name__)


def main() -> None:
    app = create_app()
    app.init_db()

    if settings.ADMIN_SERVERS_ENABLED:
        try:
            servers = bootstrap(settings, app.extensions["db_engine"])
        except BootstrapError as e:
            logger.critical(f"Aborting startup: {e}")
            sys.exit(1)
        atexit.register(servers.shutdown)

    app.run(host=settings.HOST, port=settings.PORT, threaded=True, use_reloader=False)


if __name__ == '__main__':
    main()
