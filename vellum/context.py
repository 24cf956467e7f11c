"""
Request-scoped layout selection.

A layout chosen for the current request (by middleware or by the
application) is held in a context variable so concurrent requests and
async tasks each see their own choice.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_layout_override: ContextVar[Optional[str]] = ContextVar(
    "vellum_layout_override", default=None
)


def get_layout_override() -> Optional[str]:
    """Layout selected for the current context, if any."""
    return _layout_override.get()


def set_layout_override(name: Optional[str]):
    """Select a layout for the current context. Returns a reset token."""
    return _layout_override.set(name)


def reset_layout_override(token) -> None:
    _layout_override.reset(token)


@contextmanager
def use_layout(name: Optional[str]) -> Iterator[None]:
    """
    Render with ``name`` as the layout inside the block.

    Example:
        with use_layout("special"):
            html = engine.render("dashboard")
    """
    token = _layout_override.set(name)
    try:
        yield
    finally:
        _layout_override.reset(token)
