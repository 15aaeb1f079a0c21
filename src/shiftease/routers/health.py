from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, text

from shiftease.config import config
from shiftease.models.database import get_db, get_redis

health = APIRouter(tags=["Health"])


@health.get("/health")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "shiftease",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config["environment"],
    }


@health.get("/health/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """Detailed health check with database and dependency checks"""
    health_status = {
        "status": "healthy",
        "service": "shiftease",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config["environment"],
        "checks": {},
    }

    # Database connectivity check
    try:
        result = db.exec(text("SELECT 1")).first()
        health_status["checks"]["database"] = "healthy" if result else "unhealthy"
    except Exception as e:
        health_status["checks"]["database"] = f"unhealthy: {str(e)}"
        health_status["status"] = "unhealthy"

    # Redis is optional; only checked when configured
    redis_client = get_redis()
    if redis_client is None:
        health_status["checks"]["redis"] = "not configured"
    else:
        try:
            redis_client.ping()
            health_status["checks"]["redis"] = "healthy"
        except Exception as e:
            health_status["checks"]["redis"] = f"unhealthy: {str(e)}"
            health_status["status"] = "unhealthy"

    # Settings without which registrations or logins fail
    missing = [
        key for key in ("database_url", "auth0_domain") if not config.get(key)
    ]
    if missing:
        health_status["checks"]["environment"] = f"missing: {', '.join(missing)}"
        health_status["status"] = "unhealthy"
    else:
        health_status["checks"]["environment"] = "healthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
