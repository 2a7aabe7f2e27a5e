"""
Tests for logger functionality.
"""

from jobly.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["queries_executed"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended as JSON, including non-JSON types."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Job created", id=5, company_handle="c1", path=tmp_path)

        content = next(tmp_path.glob("*.log")).read_text()
        assert '"company_handle": "c1"' in content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_query("SELECT", 3)
        logger.record_query("SELECT", 0)
        logger.record_query("INSERT", 1)
        logger.record_query_failure("IntegrityError")

        metrics = logger.get_metrics()

        assert metrics["queries_executed"] == 3
        assert metrics["rows_returned"] == 4
        assert metrics["queries_by_statement"] == {"SELECT": 2, "INSERT": 1}
        assert metrics["queries_failed"] == 1
        assert metrics["errors_by_type"]["IntegrityError"] == 1

    def test_get_metrics_returns_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_query("DELETE", 1)

        logger.get_metrics()["queries_by_statement"]["DELETE"] = 99

        assert logger.metrics["queries_by_statement"]["DELETE"] == 1

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_query("UPDATE", 1)

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "Queries: 1 ok, 0 failed" in content
        assert "UPDATE: 1" in content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        log_files = list(tmp_path.glob("jobly_*.log"))
        assert len(log_files) == 1
        assert "Test message" in log_files[0].read_text()

    def test_no_outputs(self, tmp_path):
        """With both outputs off nothing is written."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False, enable_file=False)

        logger.info("Nowhere")

        assert list(tmp_path.iterdir()) == []


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_query("SELECT", 1)

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2.metrics["queries_executed"] == 0

    def test_settings_defaults(self, tmp_path, monkeypatch):
        """Unspecified options come from JOBLY_LOG_* variables."""
        monkeypatch.setenv("JOBLY_LOG_LEVEL", "warning")
        monkeypatch.setenv("JOBLY_LOG_DIR", str(tmp_path / "from_env"))
        monkeypatch.setenv("JOBLY_LOG_TO_FILE", "true")
        reset_logger()

        logger = get_logger(enable_console=False)
        logger.warning("to file")

        assert logger.logger.level == 30
        assert len(list((tmp_path / "from_env").glob("*.log"))) == 1
