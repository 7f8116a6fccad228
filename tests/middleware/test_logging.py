import logging

import optuna
import pytest

from tidyflow.middleware import set_logger_config


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    # set_logger_config が追加したハンドラだけを外す
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.captureWarnings(False)
    optuna.logging.disable_propagation()
    optuna.logging.enable_default_handler()


def test_set_logger_config_writes_log_file(tmp_path, restore_root_logger):
    log_file_path = tmp_path / "log.txt"

    set_logger_config(log_file_path=log_file_path)
    logging.getLogger("tidyflow.train").info("fitted workflow")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert len(logging.getLogger().handlers) == 2
    assert "tidyflow.train INFO: fitted workflow" in log_file_path.read_text()


def test_set_logger_config_without_file(restore_root_logger):
    set_logger_config(level=logging.DEBUG)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert [type(handler) for handler in root.handlers] == [logging.StreamHandler]


def test_set_logger_config_routes_tuning_logs_to_root(restore_root_logger):
    set_logger_config()

    # optuna のログはルートロガーに流れ、試行ごとの INFO ログは出力しない
    assert logging.getLogger("optuna").propagate
    assert logging.getLogger("optuna").level == logging.WARNING
    assert logging.getLogger("lightgbm").level == logging.WARNING
