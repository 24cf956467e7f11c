"""
Name resolution - Turning a requested name into a registry key.

Keys have three shapes:

    "<layout>:<page>"   page rendered inside a layout
    ":<page>"           page rendered on its own
    "_<block>"          a block rendered on its own
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

LAYOUT_ENTRY = "layout"
PAGE_ENTRY = "page"
ERROR_NAME = "error"
SEPARATOR = ":"
BLOCK_PREFIX = "_"


class NameMode(str, Enum):
    BLOCK = "block"
    PAGE_ONLY = "page_only"
    EXPLICIT_LAYOUT = "explicit_layout"
    IMPLICIT_LAYOUT = "implicit_layout"


@dataclass(frozen=True)
class Resolution:
    """Registry key plus the definition executed first."""
    key: str
    entry: str
    mode: NameMode


def layout_key(layout: str, page: str) -> str:
    return f"{layout}{SEPARATOR}{page}"


def page_key(page: str) -> str:
    return f"{SEPARATOR}{page}"


def resolve_name(
    name: str,
    default_layout: str,
    layout_override: Optional[str] = None,
) -> Resolution:
    """
    Resolve a requested name.

    - ``_x``: block ``_x``, entry ``_x``
    - ``:x``: page ``x`` without layout, entry ``page``
    - ``l:x``: page ``x`` in layout ``l``, entry ``layout``
    - ``x``: page ``x`` in the override layout or the default one
    - ``""``: the ``error`` page in the override or default layout
    """
    if name.startswith(BLOCK_PREFIX):
        return Resolution(name, name, NameMode.BLOCK)

    if name.startswith(SEPARATOR):
        return Resolution(name, PAGE_ENTRY, NameMode.PAGE_ONLY)

    if SEPARATOR in name:
        return Resolution(name, LAYOUT_ENTRY, NameMode.EXPLICIT_LAYOUT)

    layout = layout_override or default_layout
    page = name or ERROR_NAME
    return Resolution(layout_key(layout, page), LAYOUT_ENTRY, NameMode.IMPLICIT_LAYOUT)
