import logging
import sys

from . import create_app
from .config import load_settings
from .errors import ConfigError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> int:
    try:
        settings = load_settings()
    except ConfigError as exc:
        logging.basicConfig(format=LOG_FORMAT)
        logging.getLogger("admission_portal").error("Startup aborted: %s", exc)
        return 1

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    app = create_app(settings)
    app.run(host="0.0.0.0", port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
