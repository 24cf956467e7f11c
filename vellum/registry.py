"""
Template registry - Immutable mapping of composite keys to compiled units.

A registry is built in one pass and never mutated; reloading builds a
new registry and swaps the reference.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import IO, Any, Dict, Iterator, List, Mapping, Tuple

from jinja2 import Template

from .faults import ExecutionFault, Fault, TemplateNotFoundFault


@dataclass(frozen=True)
class CompiledUnit:
    """
    One executable template: a set of definitions plus the entry called.

    Attributes:
        key: Registry key
        entry: Definition executed on render
        template: Compiled Jinja2 template
        definitions: Names of all definitions in the unit
        files: Source files the unit was assembled from
    """

    key: str
    entry: str
    template: Template = field(repr=False, compare=False)
    definitions: Tuple[str, ...] = ()
    files: Tuple[str, ...] = ()

    def execute(self, sink: IO[str], data: Any = None) -> None:
        """
        Stream the rendered entry into ``sink``.

        Output written before a failure stays in the sink.
        """
        try:
            for chunk in self.template.generate(data=data):
                sink.write(chunk)
        except Fault:
            raise
        except Exception as exc:
            raise ExecutionFault(self.key, exc) from exc

    def render(self, data: Any = None) -> str:
        try:
            return self.template.render(data=data)
        except Fault:
            raise
        except Exception as exc:
            raise ExecutionFault(self.key, exc) from exc


class TemplateRegistry(Mapping[str, CompiledUnit]):
    """Read-only key -> CompiledUnit mapping."""

    def __init__(self, units: Mapping[str, CompiledUnit]):
        self._units = MappingProxyType(dict(units))

    @classmethod
    def empty(cls) -> "TemplateRegistry":
        return cls({})

    def __getitem__(self, key: str) -> CompiledUnit:
        return self._units[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def lookup(self, key: str) -> CompiledUnit:
        """Return the unit for ``key`` or raise TemplateNotFoundFault."""
        try:
            return self._units[key]
        except KeyError:
            raise TemplateNotFoundFault(key) from None

    def names(self) -> List[str]:
        """All keys, sorted."""
        return sorted(self._units)

    def __repr__(self) -> str:
        return f"TemplateRegistry({len(self)} units)"
