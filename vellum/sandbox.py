"""
Template Security - Sandboxing policy and environment construction.

Provides:
- Sandboxed Jinja2 environment (default) or a plain one
- Allowlist-based filter and test registry
- XSS protection via autoescape
"""

from typing import Optional, Set
from dataclasses import dataclass, field

from jinja2 import Environment
from jinja2.sandbox import SandboxedEnvironment


@dataclass
class SandboxPolicy:
    """
    Template sandbox security policy.

    Filters and tests not on the allowlist are removed from the
    environment.

    Attributes:
        allow_unsafe_filters: Keep every built-in filter
        allow_unsafe_tests: Keep every built-in test
        allowed_filters: Whitelist of allowed filter names
        allowed_tests: Whitelist of allowed test names
    """

    allow_unsafe_filters: bool = False
    allow_unsafe_tests: bool = False

    allowed_filters: Set[str] = field(default_factory=lambda: {
        "abs", "attr", "batch", "capitalize", "center", "default",
        "dictsort", "escape", "filesizeformat", "first", "float",
        "forceescape", "format", "groupby", "indent", "int", "join",
        "last", "length", "list", "lower", "map", "max", "min",
        "reject", "rejectattr", "replace", "reverse", "round",
        "select", "selectattr", "slice", "sort", "string",
        "striptags", "sum", "title", "trim", "truncate", "unique",
        "upper", "urlencode", "wordcount", "wordwrap", "xmlattr",
        "count", "d", "e",
    })

    allowed_tests: Set[str] = field(default_factory=lambda: {
        "boolean", "callable", "defined", "divisibleby", "eq", "even",
        "false", "ge", "gt", "in", "iterable", "le", "lower", "lt",
        "mapping", "ne", "none", "number", "odd", "sameas", "sequence",
        "string", "true", "undefined", "upper",
    })

    @classmethod
    def strict(cls) -> "SandboxPolicy":
        """Strict policy for production (minimal allowlist)."""
        return cls(
            allow_unsafe_filters=False,
            allow_unsafe_tests=False,
        )

    @classmethod
    def permissive(cls) -> "SandboxPolicy":
        """Permissive policy for development (expanded allowlist)."""
        policy = cls()
        policy.allowed_filters.update(["tojson", "pprint", "urlize", "safe"])
        return policy

    def is_filter_allowed(self, name: str) -> bool:
        """Check if filter is allowed."""
        return self.allow_unsafe_filters or name in self.allowed_filters

    def is_test_allowed(self, name: str) -> bool:
        """Check if test is allowed."""
        return self.allow_unsafe_tests or name in self.allowed_tests


def create_environment(
    policy: Optional[SandboxPolicy] = None,
    *,
    sandboxed: bool = True,
    autoescape: bool = True,
) -> Environment:
    """
    Create the Jinja2 environment templates are compiled in.

    Args:
        policy: Filter/test allowlist (strict by default)
        sandboxed: Use SandboxedEnvironment
        autoescape: Escape values on output

    Returns:
        Configured environment with no loader attached
    """
    env_class = SandboxedEnvironment if sandboxed else Environment
    env = env_class(autoescape=autoescape)

    if sandboxed:
        policy = policy or SandboxPolicy.strict()
        env.filters = {
            name: func for name, func in env.filters.items()
            if policy.is_filter_allowed(name)
        }
        env.tests = {
            name: func for name, func in env.tests.items()
            if policy.is_test_allowed(name)
        }

    return env
