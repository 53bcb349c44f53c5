from __future__ import annotations

from typing import Any, Callable

from starlette.datastructures import Headers
from starlette.requests import Request


JSON_MEDIA_TYPE = "application/json"


class MalformedJSONBody(ValueError):
    """Request declared a JSON body that does not decode."""


def _is_json(scope: dict[str, Any]) -> bool:
    content_type = Headers(scope=scope).get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower() == JSON_MEDIA_TYPE


class JSONBodyMiddleware:
    """Decodes ``application/json`` request bodies before routing.

    The decoded value lands in ``request.state.json_body``; the raw bytes are
    replayed to the application unchanged. A body that fails to decode raises
    ``MalformedJSONBody`` into the generic 500 path.
    """

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http" or not _is_json(scope):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        body = await request.body()

        if body.strip():
            try:
                payload = await request.json()
            except ValueError as exc:
                raise MalformedJSONBody(str(exc)) from exc
            scope.setdefault("state", {})["json_body"] = payload

        replayed = False

        async def replay() -> dict[str, Any]:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)
