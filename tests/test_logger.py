import logging

from logger import _level_from_env, build_logger


def test_level_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert _level_from_env() == logging.DEBUG

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert _level_from_env() == logging.INFO

    monkeypatch.delenv("LOG_LEVEL")
    assert _level_from_env(logging.WARNING) == logging.WARNING


def test_log_file_handler(monkeypatch, tmp_path):
    log_path = tmp_path / "dashboard.log"
    monkeypatch.setenv("LOG_FILE", str(log_path))
    test_logger = build_logger("trading_dashboard_file_test")
    test_logger.propagate = False
    try:
        test_logger.warning("written to file")
        for handler in test_logger.handlers:
            handler.flush()
        assert "written to file" in log_path.read_text()
    finally:
        for handler in list(test_logger.handlers):
            handler.close()
            test_logger.removeHandler(handler)
