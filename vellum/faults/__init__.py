"""
Vellum Faults - Typed fault signals for the template engine.

Every error the engine raises is a Fault carrying a stable code, a
domain and a severity, so callers and tests can match on what went
wrong rather than on message text.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
- Domain faults for configuration, build, routing and execution
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DOMAIN_DEFAULTS,
)

from .domains import (
    ConfigurationFault,
    FunctionNameConflictFault,
    ConfigInvalidFault,
    BuildFault,
    TemplateDirectoryMissingFault,
    TemplateReadFault,
    NoLayoutsFault,
    BlockNameMismatchFault,
    DuplicateBlockFault,
    TemplateSyntaxFault,
    RoutingFault,
    TemplateNotFoundFault,
    BlockNotFoundFault,
    InvalidBlockNameFault,
    BlockPrefixMissingFault,
    BlockNameTooLongFault,
    ExecutionFault,
    UnrecoverableFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",
    
    # Configuration
    "ConfigurationFault",
    "FunctionNameConflictFault",
    "ConfigInvalidFault",
    
    # Build
    "BuildFault",
    "TemplateDirectoryMissingFault",
    "TemplateReadFault",
    "NoLayoutsFault",
    "BlockNameMismatchFault",
    "DuplicateBlockFault",
    "TemplateSyntaxFault",
    
    # Routing
    "RoutingFault",
    "TemplateNotFoundFault",
    "BlockNotFoundFault",
    "InvalidBlockNameFault",
    "BlockPrefixMissingFault",
    "BlockNameTooLongFault",
    
    # Execution
    "ExecutionFault",
    "UnrecoverableFault",
]
