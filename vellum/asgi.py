"""
ASGI adapters - Layout selection middleware and template endpoints.

Both are plain ASGI callables and work with any ASGI server or
framework that mounts ASGI apps.
"""

from typing import Any, Callable, Dict, Iterable, Optional, Tuple
import logging

from .context import use_layout
from .engine import TemplateEngine
from .faults import Fault

logger = logging.getLogger("vellum.asgi")

XHR_HEADER = b"x-requested-with"
XHR_VALUE = b"XMLHttpRequest"


def _header(scope: dict, name: bytes) -> Optional[bytes]:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value
    return None


def is_xhr(scope: dict) -> bool:
    """Whether the request carries ``X-Requested-With: XMLHttpRequest``."""
    return _header(scope, XHR_HEADER) == XHR_VALUE


class LayoutMiddleware:
    """
    Selects the layout for every HTTP request.

    Requests sent with ``X-Requested-With: XMLHttpRequest`` get
    ``xhr_layout``, all others get ``layout``. A ``selector`` callable
    taking the scope replaces that rule; returning None leaves the
    engine default in place.

    Args:
        app: Wrapped ASGI app
        layout: Layout for regular requests
        xhr_layout: Layout for XMLHttpRequest requests
        selector: Custom ``scope -> layout name`` function

    Example:
        app = LayoutMiddleware(app, xhr_layout="partial")
    """

    def __init__(
        self,
        app: Callable,
        *,
        layout: str = "application",
        xhr_layout: Optional[str] = None,
        selector: Optional[Callable[[dict], Optional[str]]] = None,
    ):
        self.app = app
        self.layout = layout
        self.xhr_layout = xhr_layout
        self.selector = selector or self._select

    def _select(self, scope: dict) -> Optional[str]:
        if self.xhr_layout and is_xhr(scope):
            return self.xhr_layout
        return self.layout

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        with use_layout(self.selector(scope)):
            await self.app(scope, receive, send)


async def send_html(
    send: Callable,
    body: str,
    *,
    status: int = 200,
    media_type: str = "text/html; charset=utf-8",
    headers: Iterable[Tuple[str, str]] = (),
) -> None:
    """Send a complete HTTP response."""
    payload = body.encode("utf-8")
    raw_headers = [
        (b"content-type", media_type.encode("latin-1")),
        (b"content-length", str(len(payload)).encode("latin-1")),
    ]
    raw_headers.extend((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers)
    await send({"type": "http.response.start", "status": status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": payload})


class TemplateEndpoint:
    """
    ASGI app rendering one template.

    Data is either fixed (``data``) or read per request from
    ``scope["state"][state_key]``, where upstream middleware put it.
    Render failures are logged and answered with HTTP 500.

    Args:
        engine: Template engine
        template_name: Name passed to ``engine.render``
        data: Static render data
        state_key: Key in ``scope["state"]`` holding the render data
        status: Status code of successful responses
        media_type: Content-Type of responses
    """

    def __init__(
        self,
        engine: TemplateEngine,
        template_name: str,
        data: Any = None,
        *,
        state_key: Optional[str] = None,
        status: int = 200,
        media_type: str = "text/html; charset=utf-8",
    ):
        self.engine = engine
        self.template_name = template_name
        self.data = data
        self.state_key = state_key
        self.status = status
        self.media_type = media_type

    def get_data(self, scope: dict) -> Any:
        if self.state_key is None:
            return self.data
        state: Dict[str, Any] = scope.get("state") or {}
        return state.get(self.state_key)

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        try:
            body = await self.engine.render_async(self.template_name, self.get_data(scope))
        except Fault as exc:
            logger.error(
                f"failed to execute template: {exc}",
                extra={"template": self.template_name, "fault": exc.to_dict()},
            )
            await send_html(
                send,
                "Internal Server Error",
                status=500,
                media_type="text/plain; charset=utf-8",
            )
            return

        await send_html(send, body, status=self.status, media_type=self.media_type)
