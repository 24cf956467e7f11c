"""
Vellum - Layout, page and block templates on Jinja2.

A template tree holds three folders:

    layouts/   page frames, each defining a ``layout`` macro
    pages/     page bodies, each defining a ``page`` macro
    blocks/    reusable partials, each defining a ``_<name>`` macro

Every layout is combined with every page, so ``render("home")`` renders
the home page inside the default layout and ``render("special:home")``
inside the ``special`` one.

Example:
    from vellum import TemplateEngine, TemplatesConfig

    engine = TemplateEngine(config=TemplatesConfig(templates_path="templates"))
    engine.must_parse_templates()
    html = engine.render("home", {"user": "Ada"})
"""

__version__ = "0.1.0"

from .config import TemplatesConfig, ConfigLoader
from .context import use_layout, get_layout_override
from .engine import TemplateEngine, MAX_BLOCK_NAME_LENGTH
from .helpers import Ref, locals_, references
from .loader import (
    TemplateSource,
    FileSystemSource,
    PackageSource,
    MemorySource,
)
from .registry import CompiledUnit, TemplateRegistry
from .resolver import NameMode, Resolution, resolve_name
from .sandbox import SandboxPolicy
from .trusted import (
    Sink,
    TrustedValue,
    TrustedHTML,
    TrustedScript,
    TrustedStyle,
    TrustedStyleSheet,
    TrustedURL,
    TrustedResourceURL,
    TrustedIdentifier,
)
from .faults import (
    Fault,
    FaultDomain,
    Severity,
    BuildFault,
    TemplateNotFoundFault,
    BlockNotFoundFault,
    InvalidBlockNameFault,
    BlockPrefixMissingFault,
    BlockNameTooLongFault,
    ExecutionFault,
    UnrecoverableFault,
)

__all__ = [
    "__version__",
    # Engine
    "TemplateEngine",
    "MAX_BLOCK_NAME_LENGTH",
    "TemplatesConfig",
    "ConfigLoader",
    "SandboxPolicy",
    # Sources
    "TemplateSource",
    "FileSystemSource",
    "PackageSource",
    "MemorySource",
    # Registry
    "CompiledUnit",
    "TemplateRegistry",
    "NameMode",
    "Resolution",
    "resolve_name",
    # Request scope
    "use_layout",
    "get_layout_override",
    # Helpers
    "Ref",
    "locals_",
    "references",
    # Trusted content
    "Sink",
    "TrustedValue",
    "TrustedHTML",
    "TrustedScript",
    "TrustedStyle",
    "TrustedStyleSheet",
    "TrustedURL",
    "TrustedResourceURL",
    "TrustedIdentifier",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "BuildFault",
    "TemplateNotFoundFault",
    "BlockNotFoundFault",
    "InvalidBlockNameFault",
    "BlockPrefixMissingFault",
    "BlockNameTooLongFault",
    "ExecutionFault",
    "UnrecoverableFault",
]
