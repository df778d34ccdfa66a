"""
Health check API endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....application.container import Container
from ....core.interfaces.lifecycle import IComponent
from ....infrastructure.config.models import ApplicationConfig
from ..dependencies import get_config, get_container

router = APIRouter()


def _now() -> str:
    """Current UTC time in ISO 8601 format."""
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def health_check(
    config: ApplicationConfig = Depends(get_config)
) -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": _now(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        }
    }


@router.get("/detailed")
async def detailed_health_check(
    container: Container = Depends(get_container),
    config: ApplicationConfig = Depends(get_config)
) -> Dict[str, Any]:
    """Health status of every registered lifecycle component."""
    components_health = {}
    overall_healthy = True

    # Check health of all registered components
    for service_type in container.get_registrations():
        component = container.try_resolve(service_type)
        # Config and registry entries have no lifecycle to report
        if not isinstance(component, IComponent):
            continue

        try:
            health_info = await component.check_health()
        except Exception as e:
            health_info = {
                "healthy": False,
                "status": "error",
                "details": {"error": str(e)}
            }

        # Any unhealthy component degrades the whole service
        components_health[component.name] = health_info
        if not health_info.get("healthy", True):
            overall_healthy = False

    return {
        "status": "healthy" if overall_healthy else "degraded",
        "timestamp": _now(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        },
        "components": components_health
    }


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness check endpoint."""
    return {
        "alive": True,
        "timestamp": _now()
    }
