"""
Tests for the queue-based logging setup.
"""

import logging
import logging.handlers

from restaurant_service.logging_config import ThreadSafeLoggingConfig


class TestThreadSafeLoggingConfig:

    def setup_method(self):
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)
        self.saved_level = self.root.level
        self.config = ThreadSafeLoggingConfig()

    def teardown_method(self):
        self.config.stop()
        self.root.handlers[:] = self.saved_handlers
        self.root.setLevel(self.saved_level)
        logging.getLogger("werkzeug").setLevel(logging.NOTSET)

    def test_root_logs_through_queue(self):
        self.config.setup_logging()
        assert len(self.root.handlers) == 1
        assert isinstance(self.root.handlers[0], logging.handlers.QueueHandler)
        assert self.root.level == logging.INFO
        assert logging.getLogger("werkzeug").level == logging.WARNING

    def test_debug_level(self):
        self.config.setup_logging(debug=True)
        assert self.root.level == logging.DEBUG

    def test_setup_twice_replaces_listener(self):
        self.config.setup_logging()
        first = self.config._log_listener
        self.config.setup_logging()
        assert self.config._log_listener is not first
        assert len(self.root.handlers) == 1
