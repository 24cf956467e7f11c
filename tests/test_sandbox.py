"""
Test sandbox policy and environment construction.
"""

import pytest
from jinja2 import Environment
from jinja2.sandbox import SandboxedEnvironment

from vellum import MemorySource, SandboxPolicy, TemplateEngine, TemplatesConfig
from vellum.faults import TemplateSyntaxFault
from vellum.sandbox import create_environment


def make_engine(page: str, **config) -> TemplateEngine:
    source = MemorySource(
        {
            "layouts/application.html": "{% macro layout(data) %}{{ page(data) }}{% endmacro %}",
            "pages/probe.html": "{% macro page(data) %}" + page + "{% endmacro %}",
        },
        directories=["blocks"],
    )
    return TemplateEngine(source, config=TemplatesConfig(**config))


class TestPolicy:

    def test_strict_allowlist(self):
        policy = SandboxPolicy.strict()

        assert policy.is_filter_allowed("upper")
        assert not policy.is_filter_allowed("safe")
        assert policy.is_test_allowed("defined")

    def test_permissive_adds_filters(self):
        policy = SandboxPolicy.permissive()

        assert policy.is_filter_allowed("tojson")
        assert policy.is_filter_allowed("safe")

    def test_allow_unsafe(self):
        policy = SandboxPolicy(allow_unsafe_filters=True)

        assert policy.is_filter_allowed("anything")


class TestEnvironment:

    def test_sandboxed_by_default(self):
        env = create_environment()

        assert isinstance(env, SandboxedEnvironment)
        assert "upper" in env.filters
        assert "safe" not in env.filters
        assert env.autoescape is True

    def test_plain_environment(self):
        env = create_environment(sandboxed=False, autoescape=False)

        assert not isinstance(env, SandboxedEnvironment)
        assert isinstance(env, Environment)
        assert "safe" in env.filters
        assert env.autoescape is False


class TestSandboxedRendering:

    def test_allowed_filter(self):
        engine = make_engine("{{ data.word | upper }}")
        engine.parse_templates()

        assert engine.render(":probe", {"word": "hi"}) == "HI"

    def test_removed_filter_fails_build(self):
        engine = make_engine("{{ data.word | safe }}")

        with pytest.raises(TemplateSyntaxFault):
            engine.parse_templates()

    def test_permissive_policy(self):
        source = MemorySource(
            {
                "layouts/application.html": "{% macro layout(data) %}{{ page(data) }}{% endmacro %}",
                "pages/probe.html": "{% macro page(data) %}{{ data.word | safe }}{% endmacro %}",
            },
            directories=["blocks"],
        )
        engine = TemplateEngine(source, policy=SandboxPolicy.permissive())
        engine.parse_templates()

        assert engine.render(":probe", {"word": "<b>"}) == "<b>"

    def test_private_attributes_hidden(self):
        engine = make_engine("{{ data.__class__ }}")
        engine.parse_templates()

        assert "dict" not in engine.render(":probe", {})

    def test_private_attributes_visible_without_sandbox(self):
        engine = make_engine("{{ data.__class__ }}", sandbox=False)
        engine.parse_templates()

        assert "dict" in engine.render(":probe", {})
