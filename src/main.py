import logging

import uvicorn

from config.config import Config
from server import app

logger = logging.getLogger(__name__)


def main():
    logger.info(f"URL Tester starting on port {Config.PORT}")
    uvicorn.run(app, host=Config.HOST, port=Config.PORT, log_config=None)


if __name__ == "__main__":
    main()
