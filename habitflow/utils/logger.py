import logging
import logging.config
from pathlib import Path

from habitflow.config import config


def setup_logger():
    """Apply the logging configuration from config and return the root logger"""
    if config.log_to_file:
        Path(config.log_dir).mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(config.get_logging_config())
    logger = logging.getLogger()
    logger.debug(f"Logging configured: level={config.log_level.value}, file={config.log_to_file}")
    return logger
