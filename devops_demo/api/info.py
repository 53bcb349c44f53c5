from __future__ import annotations

from fastapi import APIRouter

from devops_demo.config import APP_NAME, get_settings
from devops_demo.models.schemas import InfoResponse, KubernetesContext, WelcomeResponse


router = APIRouter(tags=["info"])


@router.api_route("/", methods=["GET", "HEAD"], response_model=WelcomeResponse)
async def index() -> WelcomeResponse:
    settings = get_settings()
    return WelcomeResponse(
        message="Welcome to DevOps Demo Application",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.api_route("/api/v1/info", methods=["GET", "HEAD"], response_model=InfoResponse)
async def info() -> InfoResponse:
    settings = get_settings()
    return InfoResponse(
        app=APP_NAME,
        version=settings.app_version,
        environment=settings.environment,
        kubernetes=KubernetesContext(
            namespace=settings.namespace,
            pod_name=settings.pod_name,
            node_name=settings.node_name,
        ),
    )
