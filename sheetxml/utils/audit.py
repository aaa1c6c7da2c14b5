from datetime import datetime, timezone
from typing import Any, Dict, Optional
import json

from ..config import config
from .logger import setup_logger


class AuditLogger:
    def __init__(self, log_file: Optional[str] = None):
        self.logger = setup_logger("sheetxml.audit", log_file or config.LOG_FILE_PATH)

    def _format_message(self,
        event_type: str,
        session_id: str,
        action: str,
        details: Optional[Dict[str, Any]] = None,
        status: str = "success"
    ) -> str:
        """Format audit log message in a structured way."""
        audit_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "session_id": session_id,
            "action": action,
            "status": status,
            "details": details or {}
        }
        return json.dumps(audit_data, default=str)

    def log_file_operation(self,
        session_id: str,
        action: str,
        file_name: str,
        file_size: int,
        status: str = "success",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log file operation events."""
        file_details = {
            "file_name": file_name,
            "file_size": file_size,
            **(details or {})
        }
        message = self._format_message(
            "file_operation",
            session_id,
            action,
            file_details,
            status
        )
        if status == "success":
            self.logger.info(message)
        else:
            self.logger.error(message)

    def log_conversion_event(self,
        session_id: str,
        input_file: str,
        output_file: str,
        conversion_time: float,
        status: str = "success",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log workbook to XML conversion events."""
        conversion_details = {
            "input_file": input_file,
            "output_file": output_file,
            "conversion_time_ms": conversion_time,
            **(details or {})
        }
        message = self._format_message(
            "conversion",
            session_id,
            "convert_workbook_to_xml",
            conversion_details,
            status
        )
        if status == "success":
            self.logger.info(message)
        else:
            self.logger.error(message)

    def log_security_event(self,
        session_id: str,
        action: str,
        ip_address: str,
        status: str = "success",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log security related events."""
        security_details = {
            "ip_address": ip_address,
            **(details or {})
        }
        message = self._format_message(
            "security",
            session_id,
            action,
            security_details,
            status
        )
        if status == "success":
            self.logger.info(message)
        else:
            self.logger.warning(message)

    def log_error(self,
        session_id: str,
        action: str,
        error: Exception,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log error events."""
        error_details = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            **(details or {})
        }
        message = self._format_message(
            "error",
            session_id,
            action,
            error_details,
            "error"
        )
        self.logger.error(message)

# Create singleton instance
audit_logger = AuditLogger()
