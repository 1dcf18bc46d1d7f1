"""Structured logging and in-process engagement metrics."""

import logging
import json
from datetime import datetime
from typing import Dict, Any, Optional

from videohub.config import settings


class StructuredLogger:
    """
    JSON-lines logger.

    Every call writes one object with timestamp, level, logger name and
    message, plus whatever keyword context the caller passes, e.g.
    ``logger.info("Video deleted", video_id=...)``.
    """

    def __init__(self, name: str, level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Re-importing the module must not stack handlers
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)

    def _render(self, level: str, message: str, context: Dict[str, Any]) -> str:
        entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": level,
            "logger": self.logger.name,
            "message": message,
        }
        entry.update(context)
        return json.dumps(entry, default=str)

    def _emit(self, level: int, message: str, context: Dict[str, Any]):
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._render(logging.getLevelName(level), message, context))

    def debug(self, message: str, **context):
        self._emit(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._emit(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._emit(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._emit(logging.ERROR, message, context)

    def critical(self, message: str, **context):
        self._emit(logging.CRITICAL, message, context)


class ApplicationMetrics:
    """
    In-memory counters behind the /metrics endpoint.

    These are observability counters only. Engagement counts served to
    clients always come from the store, never from here.
    """

    def __init__(self):
        self.started_at = datetime.utcnow()
        self.reset()

    def reset(self):
        """Zero every counter."""
        self.metrics = {
            "requests": {
                "total": 0,
                "success": 0,
                "error": 0,
                "by_error_code": {}
            },
            "toggles": {
                "created": 0,
                "removed": 0,
                "conflicts_absorbed": 0,
                "by_edge_kind": {}
            },
            "views_recorded": 0,
            "integrity_faults": 0,
            "uptime_seconds": 0,
        }

    def increment_request(self, success: bool = True, error_code: Optional[str] = None):
        """
        Count one finished request.

        Args:
            success: Response status was below 400
            error_code: Domain error code (or ``http_<status>``) for failures
        """
        requests_seen = self.metrics["requests"]
        requests_seen["total"] += 1

        if success:
            requests_seen["success"] += 1
            return

        requests_seen["error"] += 1
        if error_code:
            by_code = requests_seen["by_error_code"]
            by_code[error_code] = by_code.get(error_code, 0) + 1

    def increment_toggle(self, edge_kind: str, state: str):
        """
        Record a toggle outcome.

        Args:
            edge_kind: Edge kind value (video_like, subscription, ...)
            state: "created" or "removed"
        """
        toggles = self.metrics["toggles"]
        toggles[state] += 1
        per_kind = toggles["by_edge_kind"].setdefault(edge_kind, {"created": 0, "removed": 0})
        per_kind[state] += 1

    def increment_conflict(self):
        """Record a duplicate-create race converted into a delete."""
        self.metrics["toggles"]["conflicts_absorbed"] += 1

    def increment_view(self):
        self.metrics["views_recorded"] += 1

    def increment_integrity_fault(self):
        """Record an entity whose owner row is missing."""
        self.metrics["integrity_faults"] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """Current counters with uptime filled in."""
        self.metrics["uptime_seconds"] = (datetime.utcnow() - self.started_at).total_seconds()
        return self.metrics

    def get_error_rate(self) -> float:
        """Failed requests as a percentage of all requests."""
        total = self.metrics["requests"]["total"]
        if not total:
            return 0.0

        return self.metrics["requests"]["error"] * 100.0 / total


# Global instances
app_logger = StructuredLogger("videohub", level=settings.LOG_LEVEL)
app_metrics = ApplicationMetrics()
