"""
Structured Logging System for the ISK Import Report
Provides rotating file logs with immediate flush for real-time monitoring
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


class ImportLogger:
    """Centralized logging with rotation and component-tagged messages"""

    def __init__(self, name="ISK-Import", log_dir="logs", log_level="INFO"):
        """
        Initialize logger with rotating file handlers

        Args:
            name: Logger name
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
        self.logger.propagate = False

        # Clear any existing handlers
        self.logger.handlers.clear()

        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        log_format = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # 1. Main rotating file handler (10MB per file, keep 5 files)
        main_handler = RotatingFileHandler(
            log_path / 'isk_import.log',
            maxBytes=10*1024*1024,
            backupCount=5,
            encoding='utf-8'
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(log_format)
        self.logger.addHandler(main_handler)

        # 2. Error-only log file (5MB per file, keep 3 files)
        error_handler = RotatingFileHandler(
            log_path / 'errors.log',
            maxBytes=5*1024*1024,
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(log_format)
        self.logger.addHandler(error_handler)

        # 3. Console handler (Cloud Logging picks up stdout/stderr)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(log_format)
        self.logger.addHandler(console_handler)

    def debug(self, message, component=""):
        self._log(logging.DEBUG, message, component)

    def info(self, message, component=""):
        self._log(logging.INFO, message, component)

    def warning(self, message, component=""):
        self._log(logging.WARNING, message, component)

    def error(self, message, component="", exc_info=False):
        self._log(logging.ERROR, message, component, exc_info=exc_info)

    def critical(self, message, component="", exc_info=False):
        self._log(logging.CRITICAL, message, component, exc_info=exc_info)

    def _log(self, level, message, component="", exc_info=False):
        """Internal logging method with component prefix"""
        if component:
            message = f"[{component}] {message}"

        self.logger.log(level, message, exc_info=exc_info)

        # Force immediate flush
        for handler in self.logger.handlers:
            handler.flush()

    def log_run_start(self, file_count, max_workers):
        self.info(
            f"Sweep started - {file_count} file(s) in upload folder, {max_workers} worker(s)",
            component="Orchestrator"
        )

    def log_file_outcome(self, outcome):
        """Log the final state of one uploaded file"""
        message = (
            f"File {outcome.source_name} ({outcome.source_id}) - {outcome.status.value} "
            f"at {outcome.state.value}"
        )
        if outcome.row_id is not None:
            message += f" - row {outcome.row_id}"
        if outcome.error:
            message += f" - {outcome.error}"

        if outcome.status.value == 'ERRORED':
            self.error(message, component="Orchestrator")
        elif outcome.status.value == 'QUARANTINED':
            self.warning(message, component="Orchestrator")
        else:
            self.info(message, component="Orchestrator")

    def log_run_summary(self, summary):
        self.info(
            f"Sweep finished - total {summary.total}, processed {summary.processed}, "
            f"quarantined {summary.quarantined}, errored {summary.errored}, "
            f"unrenamed {summary.unrenamed}",
            component="Orchestrator"
        )

    def log_sheet_append(self, row_id, checksum):
        self.info(
            f"Appended report row {row_id if row_id is not None else '?'} ({checksum})",
            component="Sheets"
        )


# Global logger instance
_global_logger = None

def get_logger(log_level=None, log_dir=None):
    """Get or create global logger instance"""
    global _global_logger
    if _global_logger is None:
        from isk_import import config
        _global_logger = ImportLogger(
            log_dir=log_dir or config.LOG_DIR,
            log_level=log_level or config.LOG_LEVEL,
        )
    return _global_logger
