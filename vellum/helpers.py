"""
Template helpers - Small data-shaping functions exposed to templates.

``locals`` builds a mapping from alternating key/value arguments so a
template can hand several values to a block in one call. ``references``
boxes values into mutable cells so a block can write a result back to
its caller.
"""

from typing import Any, Dict, Optional


def locals_(*args: Any) -> Dict[str, Any]:
    """
    Build a mapping from alternating key/value arguments.

    Keys are stringified. A trailing key without a value is ignored.

    Example:
        {{ d_block("_card", locals("title", page.title, "count", 3)) }}
    """
    result: Dict[str, Any] = {}
    for index in range(0, len(args) - 1, 2):
        result[str(args[index])] = args[index + 1]
    return result


class Ref:
    """
    Mutable cell shared between a template and the blocks it calls.

    ``set`` returns an empty string so ``{{ ref.set(x) }}`` writes nothing
    into the output.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> str:
        self.value = value
        return ""

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Ref):
            return self.value == other.value
        return NotImplemented

    __hash__ = None


def references(*args: Any) -> Dict[str, Optional[Ref]]:
    """
    Like ``locals`` but every value is boxed into a Ref.

    ``None`` stays ``None`` and an existing Ref is kept unchanged, so the
    caller and the block share the same cell.

    Example:
        {% set refs = references("total", 0) %}
        {{ d_block("_sum", refs) }}{{ refs.total }}
    """
    boxed: Dict[str, Optional[Ref]] = {}
    for key, value in locals_(*args).items():
        if value is None or isinstance(value, Ref):
            boxed[key] = value
        else:
            boxed[key] = Ref(value)
    return boxed
