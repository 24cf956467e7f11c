"""
Test dynamic block dispatch (d_block / render_block).
"""

import logging

import pytest

from vellum import MAX_BLOCK_NAME_LENGTH, MemorySource, TemplatesConfig, TemplateEngine, TrustedHTML
from vellum.engine import _active_render
from vellum.faults import (
    BlockNameTooLongFault,
    BlockNotFoundFault,
    BlockPrefixMissingFault,
    ExecutionFault,
    InvalidBlockNameFault,
    TemplateNotFoundFault,
)


class TestRenderBlock:

    def test_returns_trusted_html(self, engine):
        result = engine.render_block("_header", {"title": "T"})

        assert result == "<h1>T</h1>"
        assert isinstance(result, TrustedHTML)

    def test_missing_prefix(self, engine):
        with pytest.raises(BlockPrefixMissingFault) as exc_info:
            engine.render_block("header")

        assert exc_info.value.code == "BLOCK_PREFIX_MISSING"
        assert isinstance(exc_info.value, InvalidBlockNameFault)

    def test_name_too_long(self, engine):
        with pytest.raises(BlockNameTooLongFault) as exc_info:
            engine.render_block("_" + "a" * MAX_BLOCK_NAME_LENGTH)

        assert exc_info.value.code == "BLOCK_NAME_TOO_LONG"
        assert exc_info.value.limit == MAX_BLOCK_NAME_LENGTH

    def test_longest_allowed_name_is_looked_up(self, engine):
        name = "_" + "a" * (MAX_BLOCK_NAME_LENGTH - 1)

        with pytest.raises(BlockNotFoundFault) as exc_info:
            engine.render_block(name)
        assert exc_info.value.key == name

    def test_not_found(self, engine):
        with pytest.raises(BlockNotFoundFault) as exc_info:
            engine.render_block("_nope")

        fault = exc_info.value
        assert isinstance(fault, TemplateNotFoundFault)
        assert fault.key == "_nope"
        assert fault.code == "BLOCK_NOT_FOUND"

    @pytest.mark.parametrize("name", [None, 42])
    def test_non_string_name(self, engine, name):
        with pytest.raises(InvalidBlockNameFault) as exc_info:
            engine.render_block(name)

        assert exc_info.value.code == "INVALID_BLOCK_NAME"
        assert exc_info.value.name == repr(name)

    def test_non_string_name_from_page(self, engine):
        with pytest.raises(InvalidBlockNameFault):
            engine.render(":dynamic", {"block": None})


class TestDBlockInTemplates:

    def test_dispatch_from_page(self, engine):
        result = engine.render("dynamic", {"block": "_header", "title": "<T>"})

        assert result == "Layout:[<h1>&lt;T&gt;</h1>]"

    def test_dispatch_other_block(self, engine):
        result = engine.render(":dynamic", {"block": "_card", "title": "x", "count": 2})

        assert result == "[<div>x:2</div>]"

    def test_dispatched_block_runs_alone(self, engine):
        # _bb calls _header, which a block-only unit does not contain.
        with pytest.raises(ExecutionFault) as exc_info:
            engine.render(":dynamic", {"block": "_bb", "title": "T"})

        assert exc_info.value.key == "_bb"

    def test_invalid_name_from_page(self, engine):
        with pytest.raises(InvalidBlockNameFault):
            engine.render(":dynamic", {"block": "header"})

    def test_unknown_block_from_page(self, engine):
        with pytest.raises(BlockNotFoundFault) as exc_info:
            engine.render(":dynamic", {"block": "_unknown"})

        assert exc_info.value.key == "_unknown"

    def test_d_block_ctx_logs(self, engine, caplog):
        with caplog.at_level(logging.INFO, logger="vellum.engine"):
            result = engine.render(":dynamic_ctx", {"block": "_header", "title": "T"})

        assert result == "[<h1>T</h1>]"
        records = [r for r in caplog.records if r.message == "d_block_ctx called"]
        assert len(records) == 1
        assert records[0].block == "_header"
        assert records[0].template == ":dynamic_ctx"
        assert records[0].content == "<h1>T</h1>"

    def test_d_block_ctx_log_disabled(self, memory_source, caplog):
        engine = TemplateEngine(memory_source, config=TemplatesConfig(disable_trusted_log=True))
        engine.parse_templates()

        with caplog.at_level(logging.INFO, logger="vellum.engine"):
            engine.render(":dynamic_ctx", {"block": "_header", "title": "T"})

        assert not [r for r in caplog.records if r.message == "d_block_ctx called"]

    def test_nested_dispatch_uses_outer_snapshot(self, memory_source):
        engine = TemplateEngine(memory_source, config=TemplatesConfig.development())
        generations = []

        original = engine._reloader.try_reload

        def counting_try_reload():
            generations.append(engine._reloader.generation)
            return original()

        engine._reloader.try_reload = counting_try_reload
        engine.render("dynamic", {"block": "_header", "title": "T"})

        # One rebuild for the page; the nested d_block reuses its registry.
        assert len(generations) == 1

    def test_other_engine_inside_render_uses_its_own_registry(self, memory_source):
        other = TemplateEngine(MemorySource(
            {
                "layouts/application.html": "{% macro layout(data) %}{{ page(data) }}{% endmacro %}",
                "blocks/header.html": "{% macro _header(data) %}other{% endmacro %}",
            },
            directories=["pages"],
        ))
        other.parse_templates()

        memory_source.mapping["pages/mixed.html"] = (
            "{% macro page(data) %}{{ _header(data) }}|{{ other_header() }}{% endmacro %}"
        )
        engine = TemplateEngine(
            memory_source,
            functions={"other_header": lambda: other.render_block("_header")},
        )
        engine.parse_templates()

        assert engine.render(":mixed", {"title": "T"}) == "<h1>T</h1>|other"
        assert _active_render.get() is None
