"""
Health check endpoints for the contact API.

Provides:
- /detailed - Configuration status of the mail transport and spam guard
- /ready - Readiness check (contact pipeline can deliver)
- /live - Liveness check (service alive)
"""
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.config import ContactConfig, settings

router = APIRouter(tags=["health"])


class ServiceHealth(BaseModel):
    """Health status of an individual service."""

    status: Literal["healthy", "degraded", "unhealthy"]
    message: Optional[str] = None


class DetailedHealthResponse(BaseModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    environment: str
    timestamp: datetime
    services: Dict[str, ServiceHealth]


def check_transport(config: ContactConfig) -> ServiceHealth:
    if not config.transport_host:
        return ServiceHealth(status="unhealthy", message="TRANSPORT_HOST not set")
    if not (config.transport_user and config.transport_pass):
        return ServiceHealth(status="degraded", message="No transport credentials")
    return ServiceHealth(status="healthy")


def check_honeypot(config: ContactConfig) -> ServiceHealth:
    if not config.honeypot_seed:
        return ServiceHealth(
            status="degraded", message="HONEYPOT_ENCRYPTION_SEED not set"
        )
    return ServiceHealth(status="healthy")


def _overall(services: Dict[str, ServiceHealth]) -> str:
    statuses = {service.status for service in services.values()}
    if "unhealthy" in statuses:
        return "unhealthy"
    if "degraded" in statuses:
        return "degraded"
    return "healthy"


@router.get(
    "/detailed",
    response_model=DetailedHealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(request: Request) -> DetailedHealthResponse:
    config: ContactConfig = request.app.state.contact_config
    services = {
        "transport": check_transport(config),
        "honeypot": check_honeypot(config),
    }
    return DetailedHealthResponse(
        status=_overall(services),
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc),
        services=services,
    )


@router.get("/ready", summary="Readiness check")
async def readiness_check(request: Request):
    config: ContactConfig = request.app.state.contact_config
    ready = (
        check_transport(config).status != "unhealthy"
        and check_honeypot(config).status == "healthy"
    )
    return JSONResponse(content={"ready": ready}, status_code=200 if ready else 503)


@router.get("/live", summary="Liveness check")
async def liveness_check() -> Dict[str, Any]:
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}
