"""
Test name resolution.
"""

import pytest

from vellum.resolver import NameMode, resolve_name


@pytest.mark.parametrize(
    "name, override, key, entry, mode",
    [
        ("_header", None, "_header", "_header", NameMode.BLOCK),
        ("_header", "special", "_header", "_header", NameMode.BLOCK),
        (":home", None, ":home", "page", NameMode.PAGE_ONLY),
        (":home", "special", ":home", "page", NameMode.PAGE_ONLY),
        ("special:home", None, "special:home", "layout", NameMode.EXPLICIT_LAYOUT),
        ("special:home", "other", "special:home", "layout", NameMode.EXPLICIT_LAYOUT),
        ("home", None, "application:home", "layout", NameMode.IMPLICIT_LAYOUT),
        ("home", "special", "special:home", "layout", NameMode.IMPLICIT_LAYOUT),
        ("", None, "application:error", "layout", NameMode.IMPLICIT_LAYOUT),
        ("", "special", "special:error", "layout", NameMode.IMPLICIT_LAYOUT),
    ],
)
def test_resolve_name(name, override, key, entry, mode):
    resolution = resolve_name(name, "application", override)

    assert resolution.key == key
    assert resolution.entry == entry
    assert resolution.mode == mode


def test_empty_override_uses_default():
    assert resolve_name("home", "application", "").key == "application:home"


def test_block_prefix_wins_over_colon():
    resolution = resolve_name("_a:b", "application")

    assert resolution.mode == NameMode.BLOCK
    assert resolution.key == "_a:b"
