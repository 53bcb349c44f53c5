from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from devops_demo.observability.metrics import METRICS_CONTENT_TYPE, render_metrics


router = APIRouter(tags=["metrics"])


@router.api_route("/metrics", methods=["GET", "HEAD"], response_class=Response)
async def metrics() -> Response:
    try:
        body = render_metrics()
    except Exception as exc:
        structlog.get_logger("metrics").exception("metrics_render_failed")
        return PlainTextResponse(str(exc), status_code=500)
    return Response(content=body, media_type=METRICS_CONTENT_TYPE)
