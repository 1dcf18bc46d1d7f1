"""
Fault reporting to Sentry and PagerDuty.

Both sinks are optional: with SENTRY_DSN and PAGERDUTY_INTEGRATION_KEY
unset, faults are only logged. Caller errors (bad ids, missing entities,
ownership) are never reported; only broken invariants are.
"""

from typing import Optional, Dict, Any
from datetime import datetime
import requests
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from videohub.config import settings
from videohub.exceptions import VideoHubError, DataIntegrityError
from videohub.services.logging_service import app_logger as logger

PAGERDUTY_EVENTS_URL = "https://events.pagerduty.com/v2/enqueue"
PAGERDUTY_SEVERITIES = ("critical", "error", "warning", "info")
QUIET_PATHS = ("/health", "/metrics", "/status")


def drop_expected_events(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Sentry ``before_send`` hook.

    Drops probe traffic and domain errors that map to 4xx/503 responses.
    """
    url = event.get("request", {}).get("url", "")
    if any(path in url for path in QUIET_PATHS):
        return None

    exc_info = (hint or {}).get("exc_info")
    if exc_info and isinstance(exc_info[1], VideoHubError) and not isinstance(exc_info[1], DataIntegrityError):
        return None

    return event


class ErrorTracker:
    """Sends exceptions to Sentry and pages through PagerDuty."""

    def __init__(self, sentry_dsn: str = "", pagerduty_key: str = ""):
        self.sentry_enabled = bool(sentry_dsn)
        self.pagerduty_key = pagerduty_key
        self.pagerduty_enabled = bool(pagerduty_key)

        if self.sentry_enabled:
            sentry_sdk.init(
                dsn=sentry_dsn,
                environment=settings.ENVIRONMENT,
                release=settings.APP_VERSION,
                traces_sample_rate=0.1,
                integrations=[FastApiIntegration(), SqlalchemyIntegration()],
                before_send=drop_expected_events,
                send_default_pii=False
            )
            logger.info("Sentry reporting enabled", environment=settings.ENVIRONMENT)

        if self.pagerduty_enabled:
            logger.info("PagerDuty paging enabled")

    def capture_exception(
        self,
        exception: Exception,
        context: Optional[Dict[str, Any]] = None,
        level: str = "error",
        tags: Optional[Dict[str, str]] = None
    ):
        """
        Log an exception and forward it to Sentry when configured.

        Args:
            exception: Exception to report
            context: Extra key/values attached to the event
            level: Sentry level (error, fatal, ...)
            tags: Searchable tags
        """
        context = context or {}
        logger.error("Exception captured", exception_type=type(exception).__name__,
                     error=str(exception), **context)

        if not self.sentry_enabled:
            return

        with sentry_sdk.new_scope() as scope:
            scope.set_context("videohub", context)
            for name, value in (tags or {}).items():
                scope.set_tag(name, value)
            scope.level = level
            sentry_sdk.capture_exception(exception)

    def page(
        self,
        summary: str,
        severity: str = "error",
        component: str = "videohub",
        details: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Open a PagerDuty incident.

        Returns:
            True if PagerDuty accepted the event
        """
        if not self.pagerduty_enabled:
            logger.warning("PagerDuty not configured, page skipped", summary=summary)
            return False

        event = {
            "routing_key": self.pagerduty_key,
            "event_action": "trigger",
            "payload": {
                "summary": summary,
                "severity": severity if severity in PAGERDUTY_SEVERITIES else "error",
                "source": "videohub",
                "component": component,
                "timestamp": datetime.utcnow().isoformat(),
                "custom_details": details or {}
            }
        }

        try:
            response = requests.post(PAGERDUTY_EVENTS_URL, json=event, timeout=10)
        except requests.RequestException as e:
            logger.error("PagerDuty request failed", summary=summary, error=str(e))
            return False

        if response.status_code != 202:
            logger.error("PagerDuty rejected event", summary=summary, status_code=response.status_code)
            return False

        logger.info("PagerDuty incident opened", summary=summary)
        return True


# Global instance
error_tracker = ErrorTracker(
    sentry_dsn=settings.SENTRY_DSN,
    pagerduty_key=settings.PAGERDUTY_INTEGRATION_KEY
)


def report_integrity_fault(exception: DataIntegrityError, **context):
    """Capture and page on a broken foreign-key invariant."""
    logger.critical("Data integrity fault", error=exception.message, **context)
    error_tracker.capture_exception(exception, context=context, level="fatal", tags={"fault": "integrity"})
    error_tracker.page(
        exception.message,
        severity="critical",
        component="projection",
        details={name: str(value) for name, value in context.items()}
    )
