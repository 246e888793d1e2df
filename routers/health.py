"""
Health check and system monitoring endpoints.
"""
import time
import psutil
from datetime import datetime, timezone
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text, select, func
import structlog

from db_config import get_db
from core.config import settings
from models.models import User
from services.ai_manager import ai_manager

router = APIRouter(prefix="/health", tags=["Health"])
logger = structlog.get_logger("health")


class HealthChecker:
    """Service for performing various health checks."""

    def __init__(self, db: Session):
        self.db = db

    def check_database(self) -> Dict[str, Any]:
        """Check database connectivity and basic operations."""
        try:
            start_time = time.time()

            self.db.execute(text("SELECT 1")).fetchone()
            user_count = self.db.execute(select(func.count(User.id))).scalar()

            response_time = (time.time() - start_time) * 1000

            return {
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
                "user_count": user_count,
                "details": "Database connection successful"
            }

        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e),
                "details": "Database connection failed"
            }

    def check_ai_service(self) -> Dict[str, Any]:
        """Report whether the assistant provider is configured; no request is made."""
        if ai_manager.is_configured:
            return {
                "status": "healthy",
                "model": ai_manager.model,
                "details": "API key configured"
            }
        return {
            "status": "not_configured",
            "details": "API key not configured, assistant answers with a static message"
        }

    def check_system_resources(self) -> Dict[str, Any]:
        """Check system resource usage."""
        try:
            cpu_percent = psutil.cpu_percent(interval=0.1)
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')

            return {
                "status": "healthy",
                "cpu_percent": cpu_percent,
                "memory": {
                    "total_gb": round(memory.total / (1024**3), 2),
                    "available_gb": round(memory.available / (1024**3), 2),
                    "percent_used": memory.percent
                },
                "disk": {
                    "total_gb": round(disk.total / (1024**3), 2),
                    "free_gb": round(disk.free / (1024**3), 2),
                    "percent_used": round((disk.used / disk.total) * 100, 2)
                }
            }

        except Exception as e:
            logger.error("System resource check failed", error=str(e))
            return {
                "status": "error",
                "error": str(e)
            }


@router.get("", summary="Liveness check")
async def health_check():
    """
    Liveness endpoint; needs neither authentication nor the database.
    """
    return {
        "status": "ok",
        "message": "SkillCircle API is running successfully!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version
    }


@router.get("/detailed", summary="Detailed health check")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Database, assistant provider and system resource checks in one report.
    """
    checker = HealthChecker(db)

    checks = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": checker.check_database(),
        "ai_service": checker.check_ai_service(),
        "system": checker.check_system_resources()
    }

    overall_status = "healthy"
    if checks["database"]["status"] != "healthy":
        overall_status = "unhealthy"
    elif checks["ai_service"]["status"] != "healthy":
        overall_status = "degraded"

    system = checks["system"]
    if overall_status == "healthy" and system["status"] == "healthy":
        if (system.get("cpu_percent", 0) > 90 or
                system.get("memory", {}).get("percent_used", 0) > 90 or
                system.get("disk", {}).get("percent_used", 0) > 90):
            overall_status = "degraded"

    checks["overall_status"] = overall_status
    logger.info("Health check performed", status=overall_status)

    if overall_status == "unhealthy":
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=checks)
    return checks


@router.get("/database", summary="Database health check")
async def database_health_check(db: Session = Depends(get_db)):
    """
    Check database connectivity and performance.
    """
    result = HealthChecker(db).check_database()

    if result["status"] != "healthy":
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=result)
    return result
