"""Health probes and operational metrics."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text
from datetime import datetime
from typing import Optional
import psutil
import os

from videohub.database import get_db
from videohub.services.logging_service import app_metrics
from videohub.config import settings

router = APIRouter()


def _now() -> str:
    return datetime.utcnow().isoformat()


def _database_error(db: Session) -> Optional[str]:
    """Run a trivial query; return the failure text, or None when healthy."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return str(e)
    return None


@router.get("/health")
async def health_check():
    """Process is up. Used by load balancers."""
    return {"status": "healthy", "environment": settings.ENVIRONMENT, "timestamp": _now()}


@router.get("/health/live")
async def liveness_check():
    """Liveness probe; never touches the database."""
    return {"status": "alive", "pid": os.getpid(), "timestamp": _now()}


@router.get("/health/ready")
async def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness probe.

    The database is the only hard dependency: every count and flag is
    read from it on each request.
    """
    error = _database_error(db)
    if error is None:
        return {"status": "ready", "checks": {"database": True}, "timestamp": _now()}

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "not_ready",
            "checks": {"database": False},
            "errors": [f"Database: {error}"],
            "timestamp": _now()
        }
    )


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Database status plus host CPU, memory and disk usage."""
    error = _database_error(db)
    database = {"status": "healthy" if error is None else "unhealthy", "type": db.get_bind().dialect.name}
    if error is not None:
        database["error"] = error

    try:
        system = {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "memory_percent": psutil.virtual_memory().percent,
            "disk_percent": psutil.disk_usage("/").percent,
            "process_count": len(psutil.pids())
        }
    except (psutil.Error, OSError) as e:
        system = {"error": f"Unable to gather system metrics: {e}"}

    return {
        "status": "healthy" if error is None else "degraded",
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "components": {"database": database},
        "system": system,
        "timestamp": _now()
    }


@router.get("/metrics")
async def application_metrics():
    """
    Request outcomes, toggle outcomes per edge kind, absorbed toggle
    races, recorded views and integrity faults.
    """
    metrics = app_metrics.get_metrics()
    metrics["requests"]["error_rate_percent"] = round(app_metrics.get_error_rate(), 2)
    return metrics


@router.get("/status")
async def status_overview():
    """One-line summary for dashboards."""
    metrics = app_metrics.get_metrics()

    return {
        "status": "operational",
        "uptime_hours": round(metrics["uptime_seconds"] / 3600, 2),
        "total_requests": metrics["requests"]["total"],
        "error_rate_percent": round(app_metrics.get_error_rate(), 2),
        "toggles": metrics["toggles"]["created"] + metrics["toggles"]["removed"],
        "integrity_faults": metrics["integrity_faults"],
        "timestamp": _now()
    }
