"""
Shared fixtures: a small layouts/pages/blocks tree, on disk and in memory.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Dict

import pytest

from vellum import MemorySource, TemplateEngine, TemplatesConfig


TEMPLATES: Dict[str, str] = {
    # Layouts
    "layouts/application.html": (
        "{% macro layout(data) %}Layout:{{ page(data) }}{% endmacro %}\n"
    ),
    "layouts/special.html": (
        "{% macro layout(data) %}Special-Layout:{{ page(data) }}{% endmacro %}\n"
    ),
    # Pages
    "pages/home.html": (
        "{% macro page(data) %}Home:{{ _header(data) }}{% endmacro %}\n"
    ),
    "pages/person.html": (
        "{% macro page(data) %}{{ data.name }} is {{ data.age }}{% endmacro %}\n"
    ),
    "pages/error.html": (
        "{% macro page(data) %}Something went wrong{% endmacro %}\n"
    ),
    "pages/dynamic.html": (
        "{% macro page(data) %}[{{ d_block(data.block, data) }}]{% endmacro %}\n"
    ),
    "pages/dynamic_ctx.html": (
        "{% macro page(data) %}[{{ d_block_ctx(data.block, data) }}]{% endmacro %}\n"
    ),
    "pages/cards.html": (
        "{% macro page(data) %}"
        "{{ _card(locals(\"title\", data.name, \"count\", 3)) }}"
        "{% endmacro %}\n"
    ),
    "pages/nested.html": (
        "{% macro page(data) %}Level Nested:{{ _bb(data) }}{% endmacro %}\n"
    ),
    "pages/counter.html": (
        "{% macro page(data) %}"
        "{% set refs = references(\"total\", 1) %}"
        "{{ _increment(refs) }}{{ refs.total }}"
        "{% endmacro %}\n"
    ),
    "pages/trusted.html": (
        "{% macro page(data) %}"
        "{{ data.raw }}|{{ trusted_html(data.raw) }}|{{ trusted_html_ctx(data.raw) }}"
        "{% endmacro %}\n"
    ),
    # Blocks
    "blocks/header.html": (
        "{% macro _header(data) %}<h1>{{ data.title }}</h1>{% endmacro %}\n"
    ),
    "blocks/card.html": (
        "should-be-hidden\n"
        "{% macro _card(data) %}<div>{{ data.title }}:{{ data.count }}</div>{% endmacro %}\n"
    ),
    "blocks/bb.html": (
        "{% macro _bb(data) %}bb({{ _header(data) }}){% endmacro %}\n"
    ),
    "blocks/_increment.html": (
        "{% macro _increment(refs) %}{{ refs.total.set(refs.total.get() + 1) }}{% endmacro %}\n"
    ),
}


def write_tree(root: Path, files: Dict[str, str]) -> None:
    """Write ``files`` (path -> text) below ``root``, creating folders."""
    for name in ("layouts", "pages", "blocks"):
        (root / name).mkdir(parents=True, exist_ok=True)
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)


@pytest.fixture
def templates_dir():
    """Create temporary templates directory."""
    temp_dir = tempfile.mkdtemp()
    templates_path = Path(temp_dir) / "templates"
    write_tree(templates_path, TEMPLATES)

    yield templates_path

    # Cleanup
    shutil.rmtree(temp_dir)


@pytest.fixture
def memory_source():
    return MemorySource(TEMPLATES)


@pytest.fixture
def engine(memory_source):
    """Engine over the in-memory tree, registry already built."""
    engine = TemplateEngine(memory_source, config=TemplatesConfig())
    engine.parse_templates()
    return engine


@pytest.fixture
def fs_engine(templates_dir):
    """Engine over the on-disk tree, registry already built."""
    engine = TemplateEngine(config=TemplatesConfig(templates_path=str(templates_dir)))
    engine.parse_templates()
    return engine
