"""
Template Engine - Layout/page/block rendering on top of Jinja2.

Provides:
- Registry build from a layouts/pages/blocks directory tree
- Name resolution ("page", "layout:page", ":page", "_block")
- Request-scoped layout override
- Dynamic block dispatch from inside templates (d_block)
- Trusted content helpers and structured-data helpers
- Development mode rebuilding templates on every render
"""

from contextvars import ContextVar
from io import StringIO
from typing import IO, Any, Callable, Dict, List, Mapping, Optional, Tuple
import asyncio
import logging

from jinja2 import pass_context

from .compiler import TemplateCompiler
from .config import TemplatesConfig
from .context import get_layout_override
from .faults import (
    BlockNameTooLongFault,
    BlockNotFoundFault,
    BlockPrefixMissingFault,
    Fault,
    FunctionNameConflictFault,
    InvalidBlockNameFault,
    UnrecoverableFault,
)
from .helpers import locals_, references
from .loader import FileSystemSource, TemplateSource
from .registry import TemplateRegistry
from .reload import ReloadController
from .resolver import BLOCK_PREFIX, resolve_name
from .sandbox import SandboxPolicy, create_environment
from .trusted import TrustedHTML, preview, trusted_functions

MAX_BLOCK_NAME_LENGTH = 255

# Engine and registry of the render in flight, so nested d_block calls
# see the same snapshot as the page that called them.
_active_render: ContextVar[Optional[Tuple["TemplateEngine", TemplateRegistry]]] = ContextVar(
    "vellum_active_render", default=None
)


class TemplateEngine:
    """
    Template engine rendering pages inside layouts.

    Args:
        source: Where template files come from (default: filesystem at
            ``config.templates_path``)
        config: Engine configuration
        functions: Extra functions exposed to templates
        logger: Logger used instead of the per-module ``vellum.*`` loggers
        policy: Sandbox policy (strict by default)

    Example:
        engine = TemplateEngine(config=TemplatesConfig(templates_path="files/templates"))
        engine.must_parse_templates()

        html = engine.render("home", {"user": user})
        html = engine.render("special:home", {"user": user})
        html = engine.render(":home", {"user": user})      # no layout
        html = engine.render("_header", {"title": "Hi"})   # block only
    """

    def __init__(
        self,
        source: Optional[TemplateSource] = None,
        *,
        config: Optional[TemplatesConfig] = None,
        functions: Optional[Mapping[str, Callable]] = None,
        logger: Optional[logging.Logger] = None,
        policy: Optional[SandboxPolicy] = None,
    ):
        self.config = config or TemplatesConfig()
        self.source = source or FileSystemSource(self.config.templates_path)
        self._custom_logger = logger
        self.logger = logger or logging.getLogger("vellum.engine")

        self.env = create_environment(
            policy,
            sandboxed=self.config.sandbox,
            autoescape=not self.config.disable_autoescape,
        )

        self._functions: Dict[str, Callable] = {}
        for name, func in (functions or {}).items():
            self.register_function(name, func)

        if self.config.add_helpers:
            self.add_helpers()

        self._compiler = TemplateCompiler(
            self.source,
            self.env,
            self.config,
            logger=logger or logging.getLogger("vellum.compiler"),
        )
        self._reloader = ReloadController(
            self._compiler.build,
            always_reload=self.config.always_reload,
            logger=logger or logging.getLogger("vellum.reload"),
        )

    # ------------------------------------------------------------------
    # Function table
    # ------------------------------------------------------------------

    def register_function(self, name: str, func: Callable) -> None:
        """
        Expose ``func`` to templates as ``name``.

        Raises:
            FunctionNameConflictFault: If the name is already registered
        """
        if name in self._functions:
            self.logger.error(
                "function name is already in use in the function table",
                extra={"helper": name},
            )
            raise FunctionNameConflictFault(name)
        self._functions[name] = func
        self.env.globals[name] = func

    def add_helpers(self) -> None:
        """Register d_block, locals, references and the trusted_* helpers."""
        self.register_function("d_block", self.render_block)
        self.register_function("d_block_ctx", self._d_block_ctx())
        self.register_function("locals", locals_)
        self.register_function("references", references)

        helpers = trusted_functions(
            disable_autoescape=self.config.disable_autoescape,
            disable_log=self.config.disable_trusted_log,
            preview_length=self.config.log_preview_length,
            logger=self._custom_logger,
        )
        for name, func in helpers.items():
            self.register_function(name, func)

    def _d_block_ctx(self) -> Callable:
        log_enabled = not self.config.disable_trusted_log
        limit = self.config.log_preview_length

        @pass_context
        def d_block_ctx(context, block_name: str, data: Any = None) -> TrustedHTML:
            rendered = self.render_block(block_name, data)
            if log_enabled:
                self.logger.info(
                    "d_block_ctx called",
                    extra={
                        "block": block_name,
                        "template": getattr(context, "name", None),
                        "content": preview(rendered, limit),
                    },
                )
            return rendered

        return d_block_ctx

    @property
    def functions(self) -> Dict[str, Callable]:
        """Copy of the function table."""
        return dict(self._functions)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def registry(self) -> TemplateRegistry:
        """The installed registry."""
        return self._reloader.registry

    def parse_templates(self) -> TemplateRegistry:
        """
        Build the registry from the source and install it.

        Raises:
            BuildFault: If any file fails; the previous registry stays installed
        """
        return self._reloader.reload()

    def reload(self) -> TemplateRegistry:
        """Rebuild now, waiting for a rebuild already in progress."""
        return self._reloader.reload()

    def must_parse_templates(self) -> TemplateRegistry:
        """
        Build the registry or stop startup.

        Raises:
            UnrecoverableFault: Wrapping the build fault
        """
        try:
            return self.parse_templates()
        except Fault as exc:
            self.logger.critical(
                f"fatal error during setup: {exc}",
                extra={"fault": exc.to_dict()},
            )
            raise UnrecoverableFault(str(exc)) from exc

    def parsed_templates(self) -> List[str]:
        """Sorted keys of the installed registry."""
        return self.registry.names()

    def _current_registry(self) -> TemplateRegistry:
        active = _active_render.get()
        if active is not None and active[0] is self:
            return active[1]
        return self._reloader.snapshot()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def execute(
        self,
        sink: IO[str],
        name: str,
        data: Any = None,
        *,
        layout: Optional[str] = None,
    ) -> None:
        """
        Render ``name`` into ``sink``.

        Args:
            sink: Writable text stream
            name: "page", "layout:page", ":page" or "_block"
            data: Value bound to ``data`` in the templates
            layout: Layout for names without one (beats the
                request-scoped override and the default)

        Raises:
            TemplateNotFoundFault: If the resolved key is not registered
            ExecutionFault: If rendering fails
            BuildFault: If an always-reload rebuild fails
        """
        registry = self._current_registry()
        resolution = resolve_name(
            name,
            self.config.default_layout,
            layout or get_layout_override(),
        )
        unit = registry.lookup(resolution.key)

        token = _active_render.set((self, registry))
        try:
            unit.execute(sink, data)
        finally:
            _active_render.reset(token)

    def render(self, name: str, data: Any = None, *, layout: Optional[str] = None) -> str:
        """Render ``name`` to a string. See ``execute``."""
        buffer = StringIO()
        self.execute(buffer, name, data, layout=layout)
        return buffer.getvalue()

    async def render_async(
        self,
        name: str,
        data: Any = None,
        *,
        layout: Optional[str] = None,
    ) -> str:
        """Render in a worker thread, keeping the caller's context variables."""
        return await asyncio.to_thread(self.render, name, data, layout=layout)

    def render_block(self, block_name: str, data: Any = None) -> TrustedHTML:
        """
        Render a block chosen at runtime and return it as trusted HTML.

        Exposed to templates as ``d_block``:

            {{ d_block("_card_" ~ data.kind, data) }}

        Raises:
            InvalidBlockNameFault: If the name is not a string
            BlockPrefixMissingFault: If the name lacks the "_" prefix
            BlockNameTooLongFault: If the name is longer than 255 characters
            BlockNotFoundFault: If no such block is registered
        """
        if not isinstance(block_name, str):
            raise InvalidBlockNameFault(repr(block_name), "block names must be strings")
        if not block_name.startswith(BLOCK_PREFIX):
            raise BlockPrefixMissingFault(block_name)
        if len(block_name) > MAX_BLOCK_NAME_LENGTH:
            raise BlockNameTooLongFault(block_name, MAX_BLOCK_NAME_LENGTH)

        registry = self._current_registry()
        unit = registry.get(block_name)
        if unit is None:
            raise BlockNotFoundFault(block_name)

        token = _active_render.set((self, registry))
        try:
            return TrustedHTML(unit.render(data))
        finally:
            _active_render.reset(token)

    def __repr__(self) -> str:
        return f"TemplateEngine({self.source!r}, {len(self.registry)} templates)"
