"""
Template compiler - Builds a registry from layouts, pages and blocks.

Every file defines its entry points as macros taking the render data:

    layouts/application.html
        {% macro layout(data) %}<main>{{ page(data) }}</main>{% endmacro %}

    pages/home.html
        {% macro page(data) %}Hello {{ data.name }}{% endmacro %}

    blocks/header.html
        {% macro _header(data) %}<h1>{{ data.title }}</h1>{% endmacro %}

A compiled unit joins the macros of several files into one template and
ends with a call of its entry macro, so a layout can call ``page`` and
any page can call any block directly.
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, TemplateSyntaxError, nodes

from .config import TemplatesConfig
from .faults import (
    BlockNameMismatchFault,
    DuplicateBlockFault,
    NoLayoutsFault,
    TemplateSyntaxFault,
)
from .loader import TemplateSource
from .registry import CompiledUnit, TemplateRegistry
from .resolver import (
    BLOCK_PREFIX,
    LAYOUT_ENTRY,
    PAGE_ENTRY,
    layout_key,
    page_key,
)


@dataclass(frozen=True)
class TemplateFile:
    """One template file, read once per build."""

    path: str
    kind: str
    source: str
    filename: str
    definitions: Tuple[str, ...]

    @property
    def stem(self) -> str:
        return posixpath.splitext(posixpath.basename(self.path))[0]


def block_key(stem: str) -> str:
    """Registry key of a block file ("header" -> "_header")."""
    if stem.startswith(BLOCK_PREFIX):
        return stem
    return BLOCK_PREFIX + stem


class TemplateCompiler:
    """
    Turns the files of a TemplateSource into a TemplateRegistry.

    Args:
        source: Where the files come from
        env: Jinja2 environment the units are compiled in
        config: Directory names and file extension
        logger: Logger for build messages
    """

    def __init__(
        self,
        source: TemplateSource,
        env: Environment,
        config: Optional[TemplatesConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.source = source
        self.env = env
        self.config = config or TemplatesConfig()
        self.logger = logger or logging.getLogger("vellum.compiler")

    def build(self) -> TemplateRegistry:
        """
        Build a complete registry.

        Raises:
            BuildFault: On the first problem found; nothing is returned
        """
        config = self.config
        layout_paths = self.source.list_files(config.layouts_path, config.file_extension)
        page_paths = self.source.list_files(config.pages_path, config.file_extension)
        block_paths = self.source.list_files(config.blocks_path, config.file_extension)

        if not layout_paths:
            raise NoLayoutsFault(config.layouts_path)

        layouts = [self._load(path, "layout") for path in layout_paths]
        pages = [self._load(path, "page") for path in page_paths]
        blocks = [self._load(path, "block") for path in block_paths]

        for layout in layouts:
            if LAYOUT_ENTRY not in layout.definitions:
                self.logger.warning(
                    f"Layout '{layout.path}' does not define '{LAYOUT_ENTRY}'",
                    extra={"template": layout.path},
                )
        for page in pages:
            if PAGE_ENTRY not in page.definitions:
                self.logger.warning(
                    f"Page '{page.path}' does not define '{PAGE_ENTRY}'",
                    extra={"template": page.path},
                )

        units: Dict[str, CompiledUnit] = {}

        for layout in layouts:
            for page in pages:
                key = layout_key(layout.stem, page.stem)
                units[key] = self._compile(key, LAYOUT_ENTRY, [*blocks, page, layout])

        for page in pages:
            key = page_key(page.stem)
            units[key] = self._compile(key, PAGE_ENTRY, [*blocks, page])

        for block in blocks:
            key = block_key(block.stem)
            if key in units:
                raise DuplicateBlockFault(key, posixpath.basename(block.path))
            if key not in block.definitions:
                raise BlockNameMismatchFault(
                    posixpath.basename(block.path), key, block.definitions
                )
            units[key] = self._compile(key, key, [block])

        registry = TemplateRegistry(units)
        self.logger.info(
            f"Parsed {len(registry)} templates from {len(layouts)} layouts, "
            f"{len(pages)} pages and {len(blocks)} blocks"
        )
        return registry

    def _load(self, path: str, kind: str) -> TemplateFile:
        text, filename = self.source.read(path)
        tree = self._parse(text, path, filename)
        return TemplateFile(
            path=path,
            kind=kind,
            source=text,
            filename=filename,
            definitions=tuple(node.name for node in self._macros(tree)),
        )

    def _parse(self, text: str, path: str, filename: str) -> nodes.Template:
        try:
            return self.env.parse(text, name=path, filename=filename)
        except TemplateSyntaxError as exc:
            raise TemplateSyntaxFault(path, exc.message or str(exc), exc.lineno) from exc

    @staticmethod
    def _macros(tree: nodes.Template) -> List[nodes.Macro]:
        return [node for node in tree.body if isinstance(node, nodes.Macro)]

    def _compile(self, key: str, entry: str, files: Sequence[TemplateFile]) -> CompiledUnit:
        """
        Compile the macros of ``files`` plus a call of ``entry`` into one template.

        Files later in ``files`` win when two define the same macro.
        """
        body: List[nodes.Node] = []
        definitions: List[str] = []
        for template_file in files:
            # Each unit gets a fresh tree; the optimizer rewrites nodes in place.
            tree = self._parse(template_file.source, template_file.path, template_file.filename)
            body.extend(self._macros(tree))
            definitions.extend(template_file.definitions)

        body.extend(self.env.parse(f"{{{{ {entry}(data) }}}}").body)

        unit_ast = nodes.Template(body, lineno=1)
        unit_ast.set_environment(self.env)
        primary = files[-1]

        try:
            code = self.env.compile(unit_ast, name=key, filename=primary.filename)
        except TemplateSyntaxError as exc:
            raise TemplateSyntaxFault(
                exc.filename or primary.path, exc.message or str(exc), exc.lineno
            ) from exc

        template = self.env.template_class.from_code(
            self.env, code, self.env.make_globals(None), None
        )

        return CompiledUnit(
            key=key,
            entry=entry,
            template=template,
            definitions=tuple(dict.fromkeys(definitions)),
            files=tuple(f.path for f in files),
        )


def build_registry(
    source: TemplateSource,
    env: Environment,
    config: Optional[TemplatesConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> TemplateRegistry:
    """Build a registry in one call."""
    return TemplateCompiler(source, env, config, logger).build()
