#!/usr/bin/env python3

import asyncio
import logging
import sys

from departures.config import load_config
from departures.container import RootContainer, start
from departures.errors import ConfigError, StorageFailure

if __name__ == "__main__":
    config_file_path = sys.argv[1] if len(sys.argv) >= 2 else None
    try:
        config = load_config(config_file_path)
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logging.fatal(str(e))
        sys.exit(1)

    log_level = config["log_level"]
    level = logging.getLevelName(str(log_level).upper())
    if isinstance(level, int):
        logging.basicConfig(level=level)
    else:
        logging.basicConfig(level=logging.INFO)
        logging.warning(
            '"{}" is not a valid logging level. Defaulted to "INFO".'.format(log_level)
        )

    logger = logging.getLogger(__name__)
    root = RootContainer()
    root.config.from_dict(config)

    try:
        asyncio.run(start(root))
    except StorageFailure:
        logger.critical("Could not initialize storage, aborting.", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")
