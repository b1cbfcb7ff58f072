import logging

from sga_worker.logging.logger import NOISY_LOGGERS, Log


class TestLogConfigure:
    def test_sets_worker_level(self) -> None:
        Log.configure("warning")
        assert logging.getLogger("sga_worker").level == logging.WARNING
        Log.configure("INFO")
        assert logging.getLogger("sga_worker").level == logging.INFO

    def test_adds_single_handler(self) -> None:
        Log.configure("INFO")
        Log.configure("INFO")
        assert len(logging.getLogger("sga_worker").handlers) == 1

    def test_quiets_client_loggers_unless_debug(self) -> None:
        Log.configure("INFO")
        assert all(logging.getLogger(n).level == logging.WARNING for n in NOISY_LOGGERS)
        Log.configure("DEBUG")
        assert all(logging.getLogger(n).level == logging.DEBUG for n in NOISY_LOGGERS)
        Log.configure("INFO")
