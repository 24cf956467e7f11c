"""
Trusted content - Marking strings as safe for a specific output sink.

Autoescaping treats every value as untrusted. Application code that
knows a value is safe for one sink (markup, a script body, a URL...)
wraps it in the matching TrustedValue subclass. All subclasses are
``markupsafe.Markup`` so Jinja2 inserts them verbatim.

Each converter also exists in a ``_ctx`` variant that records an audit
log entry naming the helper and the template that called it.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from jinja2 import pass_context
from markupsafe import Markup

_logger = logging.getLogger("vellum.trusted")


class Sink(str, Enum):
    """Output contexts a value can be trusted for."""
    HTML = "html"
    SCRIPT = "script"
    STYLE = "style"
    STYLESHEET = "stylesheet"
    URL = "url"
    RESOURCE_URL = "resource_url"
    IDENTIFIER = "identifier"


class TrustedValue(Markup):
    """A string trusted for one sink. Never escaped on output."""

    sink: Sink = Sink.HTML

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str.__repr__(self)})"


class TrustedHTML(TrustedValue):
    sink = Sink.HTML


class TrustedScript(TrustedValue):
    sink = Sink.SCRIPT


class TrustedStyle(TrustedValue):
    sink = Sink.STYLE


class TrustedStyleSheet(TrustedValue):
    sink = Sink.STYLESHEET


class TrustedURL(TrustedValue):
    sink = Sink.URL


class TrustedResourceURL(TrustedValue):
    sink = Sink.RESOURCE_URL


class TrustedIdentifier(TrustedValue):
    sink = Sink.IDENTIFIER


TRUSTED_TYPES: Dict[str, type] = {
    "trusted_html": TrustedHTML,
    "trusted_script": TrustedScript,
    "trusted_style": TrustedStyle,
    "trusted_stylesheet": TrustedStyleSheet,
    "trusted_url": TrustedURL,
    "trusted_resource_url": TrustedResourceURL,
    "trusted_identifier": TrustedIdentifier,
}


def _converter(cls: type) -> Callable[[Any], TrustedValue]:
    def convert(value: Any = None) -> TrustedValue:
        if value is None:
            return cls("")
        return cls(str(value))

    convert.__name__ = cls.__name__
    return convert


def _passthrough(value: Any = None) -> Any:
    return value


trusted_html = _converter(TrustedHTML)
trusted_script = _converter(TrustedScript)
trusted_style = _converter(TrustedStyle)
trusted_stylesheet = _converter(TrustedStyleSheet)
trusted_url = _converter(TrustedURL)
trusted_resource_url = _converter(TrustedResourceURL)
trusted_identifier = _converter(TrustedIdentifier)


def preview(value: Any, limit: int) -> str:
    """Shorten content for a log entry."""
    text = "" if value is None else str(value)
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _logged(
    name: str,
    convert: Callable,
    preview_length: int,
    log: Optional[logging.Logger],
) -> Callable:
    @pass_context
    def helper(context, value: Any = None):
        if log is not None:
            log.info(
                f"{name} called",
                extra={
                    "helper": name,
                    "template": getattr(context, "name", None),
                    "content": preview(value, preview_length),
                },
            )
        return convert(value)

    helper.__name__ = name
    return helper


def trusted_functions(
    *,
    disable_autoescape: bool = False,
    disable_log: bool = False,
    preview_length: int = 64,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, Callable]:
    """
    Build the fourteen trusted_* helpers.

    With autoescaping disabled every converter returns its argument
    unchanged. The ``_ctx`` variants log to ``logger`` (default
    ``vellum.trusted``) unless ``disable_log`` is set.
    """
    log = None if disable_log else (logger or _logger)
    functions: Dict[str, Callable] = {}
    for name, cls in TRUSTED_TYPES.items():
        convert = _passthrough if disable_autoescape else _converter(cls)
        functions[name] = convert
        functions[f"{name}_ctx"] = _logged(
            f"{name}_ctx", convert, preview_length, log
        )
    return functions
