import logging
import os
from contextlib import contextmanager
from datetime import datetime

import pytest

from jobsync import log as jobsync_log
from jobsync.dependencies import open_synchronizer


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level, before = root.level, list(root.handlers)
    yield root
    for handler in list(root.handlers):
        if handler.get_name() in ("jobsync-console", "jobsync-file") and handler not in before:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _file_handlers(root):
    return [h for h in root.handlers if h.get_name() == "jobsync-file"]


def _log_name():
    return f"jobsync_{datetime.now().strftime('%Y-%m-%d')}.log"


@contextmanager
def _bare_root(root):
    """Run with no root handlers, as a fresh process would start."""
    saved = root.handlers[:]
    root.handlers.clear()
    try:
        yield
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved


class TestConfigureLogging:
    def test_explicit_call_adds_file_handler_after_console(self, root_logger, tmp_path):
        with _bare_root(root_logger):
            jobsync_log.configure_logging()
            assert [h.get_name() for h in root_logger.handlers] == ["jobsync-console"]

            jobsync_log.configure_logging("debug", tmp_path / "logs")
            logging.getLogger("jobsync.tests").debug("written to disk")
            for handler in _file_handlers(root_logger):
                handler.flush()

            assert [h.get_name() for h in root_logger.handlers] == ["jobsync-console", "jobsync-file"]
            assert root_logger.level == logging.DEBUG
            assert root_logger.handlers[0].level == logging.DEBUG
            assert "written to disk" in (tmp_path / "logs" / _log_name()).read_text(encoding="utf-8")

    def test_level_is_reset_on_console_handler(self, root_logger):
        with _bare_root(root_logger):
            jobsync_log.configure_logging("warning")
            jobsync_log.configure_logging("error")

            assert root_logger.level == logging.ERROR
            assert len(root_logger.handlers) == 1
            assert root_logger.handlers[0].level == logging.ERROR

    def test_file_handler_joins_foreign_handlers(self, root_logger, tmp_path):
        foreign = [h for h in root_logger.handlers if not h.get_name()]

        jobsync_log.configure_logging("info", tmp_path / "logs")

        assert len(_file_handlers(root_logger)) == 1
        assert all(h in root_logger.handlers for h in foreign)

    def test_new_directory_replaces_file_handler(self, root_logger, tmp_path):
        jobsync_log.configure_logging("info", tmp_path / "first")
        jobsync_log.configure_logging("info", tmp_path / "first")
        jobsync_log.configure_logging("info", tmp_path / "second")

        handlers = _file_handlers(root_logger)
        assert len(handlers) == 1
        assert handlers[0].baseFilename == os.path.abspath(tmp_path / "second" / _log_name())


class TestOpenSynchronizer:
    @pytest.mark.asyncio
    async def test_logs_under_the_data_directory(self, root_logger, settings, transport):
        async with open_synchronizer(settings, transport=transport):
            pass

        assert (settings.data_directory / "logs" / _log_name()).exists()
        assert len(_file_handlers(root_logger)) == 1
