"""Structured JSON logging with OpenTelemetry trace correlation"""
import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional
from contextvars import ContextVar

from opentelemetry import trace

trace_id_var: ContextVar[Optional[str]] = ContextVar('trace_id', default=None)


class CloudLogger:
    """
    Structured logger emitting one JSON object per line on stdout.

    Enhanced with:
    - Automatic trace ID injection (OpenTelemetry span, else the context var)
    - Configurable log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - Convenience method for tool call outcomes
    """

    def __init__(self, name: str, level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(self._get_formatter())
            self.logger.addHandler(handler)

    def _get_formatter(self) -> logging.Formatter:
        """Records are already serialized JSON, so pass the message through"""
        return logging.Formatter("%(message)s")

    def _log_structured(self, level: str, message: str, **kwargs):
        """Log structured data with optional context fields and trace ID"""
        log_entry = {
            "severity": level,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "logger": self.logger.name,
            "message": message,
        }

        trace_id = self._get_trace_id_from_otel()
        if not trace_id:
            trace_id = trace_id_var.get()

        if trace_id:
            log_entry["trace_id"] = trace_id

        if kwargs:
            log_entry.update(kwargs)

        getattr(self.logger, level.lower())(json.dumps(log_entry, default=str))

    def _get_trace_id_from_otel(self) -> Optional[str]:
        """Get trace ID from OpenTelemetry current span context"""
        span = trace.get_current_span()
        context = span.get_span_context()
        if context.is_valid:
            return format(context.trace_id, '032x')
        return None

    def info(self, message: str, **kwargs):
        """Log info message with optional context"""
        self._log_structured("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context"""
        self._log_structured("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context"""
        self._log_structured("ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context"""
        self._log_structured("DEBUG", message, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context"""
        self._log_structured("CRITICAL", message, **kwargs)

    def log_tool_call(
        self,
        tool_name: str,
        call_id: Optional[str],
        success: bool,
        message: str,
        **kwargs
    ):
        """
        Convenience method for logging a tool call outcome.

        Args:
            tool_name: Function the model asked for (e.g., "set_sum_assured")
            call_id: Model-assigned call identifier
            success: Whether the call changed policy state
            message: Outcome text returned to the model
            **kwargs: Additional context
        """
        log_data = {
            "tool": tool_name,
            "call_id": call_id,
            "success": success,
            "outcome": message,
            **kwargs
        }

        if success:
            self.info(f"Tool {tool_name} applied", **log_data)
        else:
            self.warning(f"Tool {tool_name} rejected", **log_data)


def get_logger(name: str, level: str = "INFO") -> CloudLogger:
    """Get or create logger instance"""
    return CloudLogger(name, level)


def set_trace_id(trace_id: Optional[str]):
    """Set trace ID in context for the current task"""
    trace_id_var.set(trace_id)


def get_trace_id() -> Optional[str]:
    """Get current trace ID from context"""
    return trace_id_var.get()
