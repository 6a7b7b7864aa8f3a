"""
Structured Logging Service

Provides structured logging for bank return file events:
- Return file received / decoded / rejected
- Generation timestamp provenance (which strategy produced the value)

Each log entry includes:
- timestamp
- event
- severity (INFO/WARN/ERROR)
- entity_type (return_file, statement, system)
"""
import json
import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class LogSeverity(str, Enum):
    """Log severity levels."""
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogEntityType(str, Enum):
    """Entity types for structured logging."""
    RETURN_FILE = "return_file"
    STATEMENT = "statement"
    SYSTEM = "system"


class StructuredLogger:
    """
    Structured logging service for return file processing.

    Logs are emitted in JSON format suitable for:
    - Application logs
    - Later metrics integration
    - Audit of which files were accepted or refused
    """

    def __init__(self, logger_name: str = "bank_returns"):
        self.logger = logging.getLogger(logger_name)
        self._ensure_handler()

    def _ensure_handler(self):
        """Ensure logger has a proper handler configured."""
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def _serialize_value(self, value: Any) -> Any:
        """Serialize decimals and dates to strings."""
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, (date, datetime, time)):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        return value

    def _create_log_entry(
        self,
        event: str,
        severity: LogSeverity,
        entity_type: LogEntityType,
        message: Optional[str] = None,
        **extra
    ) -> dict:
        """Create a structured log entry."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "severity": severity.value,
            "entity_type": entity_type.value,
        }

        if message:
            entry["message"] = message

        for key, value in extra.items():
            entry[key] = self._serialize_value(value)

        return entry

    def _log(self, entry: dict, severity: LogSeverity):
        """Emit the log entry at the appropriate level."""
        log_str = json.dumps(entry)
        if severity == LogSeverity.ERROR:
            self.logger.error(log_str)
        elif severity == LogSeverity.WARN:
            self.logger.warning(log_str)
        else:
            self.logger.info(log_str)

    # Return file events
    def return_file_received(self, filename: Optional[str], file_size: int):
        """Log return file received event."""
        entry = self._create_log_entry(
            event="return_file.received",
            severity=LogSeverity.INFO,
            entity_type=LogEntityType.RETURN_FILE,
            message=f"Return file received: {filename or '<unnamed>'}",
            filename=filename,
            file_size=file_size,
        )
        self._log(entry, LogSeverity.INFO)

    def return_file_decoded(
        self,
        filename: Optional[str],
        bank_code: str,
        line_count: int,
        entry_count: int,
        diagnostic_count: int,
    ):
        """Log return file decoded event. Diagnostics downgrade it to WARN."""
        severity = LogSeverity.WARN if diagnostic_count else LogSeverity.INFO
        entry = self._create_log_entry(
            event="return_file.decoded",
            severity=severity,
            entity_type=LogEntityType.STATEMENT,
            message=f"Return file decoded for bank {bank_code}",
            filename=filename,
            bank_code=bank_code,
            line_count=line_count,
            entry_count=entry_count,
            diagnostic_count=diagnostic_count,
        )
        self._log(entry, severity)

    def return_file_rejected(self, filename: Optional[str], reason: str):
        """Log return file rejected event (fatal decode error)."""
        entry = self._create_log_entry(
            event="return_file.rejected",
            severity=LogSeverity.ERROR,
            entity_type=LogEntityType.RETURN_FILE,
            message=f"Return file rejected: {reason}",
            filename=filename,
            reason=reason,
        )
        self._log(entry, LogSeverity.ERROR)

    def timestamp_provenance(
        self,
        bank_code: str,
        date_source: Optional[str],
        time_source: Optional[str],
    ):
        """Log which strategy produced the generation date and time."""
        entry = self._create_log_entry(
            event="return_file.provenance",
            severity=LogSeverity.INFO,
            entity_type=LogEntityType.STATEMENT,
            bank_code=bank_code,
            date_source=date_source,
            time_source=time_source,
        )
        self._log(entry, LogSeverity.INFO)


# Global logger instance
return_file_logger = StructuredLogger()
