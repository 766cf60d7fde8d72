import os
import tempfile

# 測試時日誌寫到暫存目錄
os.environ.setdefault("CUSTOM_ROLLS_LOG_FILE", os.path.join(tempfile.gettempdir(), "custom-rolls-test.log"))

import pytest

from custom_rolls.utils.config import ConfigManager


def make_roller(values):
    """依序返回給定點數的擲骰函數"""
    queue = list(values)

    def roller(sides):
        value = queue.pop(0)
        assert 1 <= value <= sides
        return value

    return roller


@pytest.fixture
def roller():
    return make_roller


@pytest.fixture
def config_manager(tmp_path):
    return ConfigManager(config_path=str(tmp_path / "config.json"))
