"""Tests for logging helpers."""
import logging

import pytest

from wabot.core.logging import LogLevel, configure_logging, get_logger


class TestGetLogger:
    """Test suite for get_logger."""
    
    @pytest.mark.parametrize("name,expected", [
        (None, "wabot"),
        ("wabot", "wabot"),
        ("storage", "wabot.storage"),
        ("wabot.connection", "wabot.connection"),
    ])
    def test_namespacing(self, name, expected):
        """Test names are placed under the package logger."""
        assert get_logger(name).name == expected
    
    def test_children_propagate(self):
        """Test child loggers keep propagating to the package logger."""
        logger = get_logger("bootstrap")
        
        assert logger.propagate is True
        assert logger.level == logging.NOTSET


class TestConfigureLogging:
    """Test suite for configure_logging."""
    
    def test_console_handler(self):
        """Test a console handler is attached at the given level."""
        logger = configure_logging("debug")
        
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False
    
    def test_repeated_calls_replace_handlers(self, tmp_path):
        """Test handlers are not duplicated."""
        log_file = tmp_path / "wabot.log"
        configure_logging(LogLevel.INFO, log_file=str(log_file))
        logger = configure_logging(LogLevel.INFO, log_file=str(log_file))
        
        assert len(logger.handlers) == 2
        get_logger("test").info("written")
        for handler in logger.handlers:
            handler.flush()
        assert "wabot.test: written" in log_file.read_text()
    
    def test_no_handlers_propagates(self):
        """Test disabling every handler keeps records flowing to root."""
        logger = configure_logging("warning", enable_console=False)
        
        assert logger.handlers == []
        assert logger.propagate is True


class TestLogLevel:
    """Test suite for LogLevel.parse."""
    
    def test_parse_forms(self):
        """Test names, numbers and members are accepted."""
        assert LogLevel.parse("info") is LogLevel.INFO
        assert LogLevel.parse(" ERROR ") is LogLevel.ERROR
        assert LogLevel.parse(10) is LogLevel.DEBUG
        assert LogLevel.parse(LogLevel.WARNING) is LogLevel.WARNING
    
    def test_parse_unknown(self):
        """Test unknown names raise ValueError."""
        with pytest.raises(ValueError):
            LogLevel.parse("verbose")
