import logging
import os
from logging.handlers import RotatingFileHandler
from typing import List


LOGGER_NAME = 'CustomRolls'
LOG_FILE_ENV = "CUSTOM_ROLLS_LOG_FILE"
DEBUG_ENV = "CUSTOM_ROLLS_DEBUG"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class BotLogger:
    """擲骰機器人的日誌，同時輸出到輪換文件和終端"""

    def __init__(self, log_file: str = "bot.log", level: int = logging.INFO):
        self.log_file = log_file
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level)

        # 同名 logger 只設置一次處理器
        if not self.logger.handlers:
            for handler in self._build_handlers(log_file):
                self.logger.addHandler(handler)

    @classmethod
    def from_env(cls) -> "BotLogger":
        """依 CUSTOM_ROLLS_LOG_FILE 和 CUSTOM_ROLLS_DEBUG 建立日誌實例"""
        level = logging.DEBUG if os.getenv(DEBUG_ENV) else logging.INFO
        return cls(log_file=os.getenv(LOG_FILE_ENV, "bot.log"), level=level)

    @staticmethod
    def _build_handlers(log_file: str) -> List[logging.Handler]:
        # 第一次寫入時才建立日誌文件
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=1024*1024,  # 1MB
            backupCount=5,
            encoding='utf-8',
            delay=True
        )
        handlers = [file_handler, logging.StreamHandler()]

        formatter = logging.Formatter(LOG_FORMAT)
        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def debug(self, message: str):
        self.logger.debug(message)


logger = BotLogger.from_env()


def get_logger() -> BotLogger:
    """獲取日誌實例"""
    return logger
