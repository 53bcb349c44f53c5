from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    timestamp: str
    uptime: float = Field(ge=0)


class ReadyResponse(BaseModel):
    status: Literal["ready"] = "ready"
    timestamp: str


class EndpointMap(BaseModel):
    health: str = "/health"
    ready: str = "/ready"
    metrics: str = "/metrics"
    api: str = "/api/v1"


class WelcomeResponse(BaseModel):
    message: str
    version: str
    environment: str
    endpoints: EndpointMap = Field(default_factory=EndpointMap)


class KubernetesContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    namespace: str
    pod_name: str = Field(alias="podName")
    node_name: str = Field(alias="nodeName")


class InfoResponse(BaseModel):
    app: str
    version: str
    environment: str
    kubernetes: KubernetesContext


class ErrorResponse(BaseModel):
    error: str
