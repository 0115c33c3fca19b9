import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from dailyroll.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def log_file_path(log_dir: Optional[str] = None, day: Optional[datetime] = None) -> Path:
    """Daily log file, e.g. logs/dailyroll_20240501.log"""
    day = day or datetime.now()
    return Path(log_dir or Config.LOG_DIR) / f'{Config.LOG_FILE_PREFIX}_{day.strftime("%Y%m%d")}.log'


def _build_handlers(log_level: int, log_dir: Optional[str]) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    
    path = log_file_path(log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding='utf-8')
    # The file always keeps debug detail
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    
    return [console_handler, file_handler]


def setup_logger(name: str, log_dir: Optional[str] = None,
                 access_log: bool = False) -> logging.Logger:
    """
    Setup a logger with console and daily file output.
    
    Module loggers (dailyroll.services.roll_service, ...) propagate to the
    named logger, so configuring 'dailyroll' once covers the whole service.
    
    Args:
        name: Logger to configure
        log_dir: Directory for the daily file, Config.LOG_DIR by default
        access_log: Also route aiohttp's request log through the same handlers
    """
    logger = logging.getLogger(name)
    
    if logger.handlers:
        return logger
    
    log_level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(log_level)
    
    handlers = _build_handlers(log_level, log_dir)
    for handler in handlers:
        logger.addHandler(handler)
    
    if access_log:
        access = logging.getLogger('aiohttp.access')
        access.setLevel(logging.INFO)
        for handler in handlers:
            access.addHandler(handler)
    
    return logger
