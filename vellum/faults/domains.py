"""
Vellum Faults - Domain-specific fault types.

Provides concrete fault classes for each stage of the engine:
- CONFIG faults (setup, fatal)
- REGISTRY faults (template build)
- ROUTING faults (name resolution, block dispatch)
- FLOW faults (template execution)
- SYSTEM faults (startup halt)
"""

from typing import Any, Iterable, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigurationFault(Fault):
    """Base class for configuration faults."""
    
    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class FunctionNameConflictFault(ConfigurationFault):
    """A helper name is already taken in the function table."""
    
    def __init__(self, name: str, **kwargs):
        self.name = name
        super().__init__(
            code="FUNCTION_NAME_CONFLICT",
            message=f"Function name '{name}' is already in use in the function table",
            metadata={"name": name, **kwargs.get("metadata", {})},
        )


class ConfigInvalidFault(ConfigurationFault):
    """Configuration value is invalid."""
    
    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# REGISTRY (build) Faults
# ============================================================================

class BuildFault(Fault):
    """Base class for registry build faults. The previous registry stays installed."""
    
    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.REGISTRY,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class TemplateDirectoryMissingFault(BuildFault):
    """A required template directory does not exist."""
    
    def __init__(self, directory: str, **kwargs):
        self.directory = directory
        super().__init__(
            code="TEMPLATE_DIRECTORY_MISSING",
            message=f"Template directory '{directory}' does not exist",
            metadata={"directory": directory, **kwargs.get("metadata", {})},
        )


class TemplateReadFault(BuildFault):
    """A template file listed by the source could not be read."""
    
    def __init__(self, path: str, reason: str, **kwargs):
        self.path = path
        super().__init__(
            code="TEMPLATE_READ_FAILED",
            message=f"Reading template '{path}' failed: {reason}",
            metadata={"path": path, "reason": reason, **kwargs.get("metadata", {})},
        )


class NoLayoutsFault(BuildFault):
    """The layouts directory holds no layout files."""
    
    def __init__(self, directory: str, **kwargs):
        self.directory = directory
        super().__init__(
            code="NO_LAYOUTS",
            message=f"At least one layout is required, none found in '{directory}'",
            metadata={"directory": directory, **kwargs.get("metadata", {})},
        )


class BlockNameMismatchFault(BuildFault):
    """A block file does not define the block its file name promises."""
    
    def __init__(self, filename: str, expected: str, defined: Iterable[str], **kwargs):
        self.filename = filename
        self.expected = expected
        self.defined = sorted(defined)
        found = ", ".join(self.defined) or "nothing"
        message = f"Block file '{filename}' must define '{expected}', but defines {found}"
        if not expected.isidentifier():
            message += "; block file names must be valid identifiers"
        super().__init__(
            code="BLOCK_NAME_MISMATCH",
            message=message,
            metadata={
                "filename": filename,
                "expected": expected,
                "defined": self.defined,
                **kwargs.get("metadata", {}),
            },
        )


class DuplicateBlockFault(BuildFault):
    """Two block files yield the same registry key."""
    
    def __init__(self, key: str, filename: str, **kwargs):
        self.key = key
        self.filename = filename
        super().__init__(
            code="DUPLICATE_BLOCK",
            message=f"Block '{key}' from '{filename}' is already defined",
            metadata={"key": key, "filename": filename, **kwargs.get("metadata", {})},
        )


class TemplateSyntaxFault(BuildFault):
    """A template file failed to parse or compile."""
    
    def __init__(self, path: str, reason: str, lineno: Optional[int] = None, **kwargs):
        self.path = path
        self.lineno = lineno
        location = f"{path}:{lineno}" if lineno else path
        super().__init__(
            code="TEMPLATE_SYNTAX_ERROR",
            message=f"{location}: {reason}",
            metadata={"path": path, "lineno": lineno, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# ROUTING Faults
# ============================================================================

class RoutingFault(Fault):
    """Base class for name resolution faults."""
    
    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.ROUTING,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class TemplateNotFoundFault(RoutingFault):
    """The composite key is not in the registry."""
    
    def __init__(self, key: str, **kwargs):
        self.key = key
        super().__init__(
            code=kwargs.get("code", "TEMPLATE_NOT_FOUND"),
            message=f"Template '{key}' not found",
            metadata={"key": key, **kwargs.get("metadata", {})},
        )


class BlockNotFoundFault(TemplateNotFoundFault):
    """A dynamically dispatched block is not in the registry."""
    
    def __init__(self, key: str, **kwargs):
        super().__init__(key, code="BLOCK_NOT_FOUND", **kwargs)


class InvalidBlockNameFault(RoutingFault):
    """A dynamically dispatched block name is malformed."""
    
    def __init__(self, name: str, reason: str, **kwargs):
        self.name = name
        self.reason = reason
        shown = name if len(name) <= 64 else name[:64] + "..."
        super().__init__(
            code=kwargs.get("code", "INVALID_BLOCK_NAME"),
            message=f"Invalid block name '{shown}': {reason}",
            metadata={"name": shown, "reason": reason, **kwargs.get("metadata", {})},
        )


class BlockPrefixMissingFault(InvalidBlockNameFault):
    """A dynamically dispatched block name lacks the leading underscore."""
    
    def __init__(self, name: str, **kwargs):
        super().__init__(
            name,
            "block names must start with '_'",
            code="BLOCK_PREFIX_MISSING",
            **kwargs,
        )


class BlockNameTooLongFault(InvalidBlockNameFault):
    """A dynamically dispatched block name exceeds the length limit."""
    
    def __init__(self, name: str, limit: int, **kwargs):
        self.limit = limit
        super().__init__(
            name,
            f"longer than {limit} characters",
            code="BLOCK_NAME_TOO_LONG",
            **kwargs,
        )


# ============================================================================
# FLOW Faults
# ============================================================================

class ExecutionFault(Fault):
    """Evaluating a compiled unit against its data failed."""
    
    def __init__(self, key: str, cause: BaseException, **kwargs):
        self.key = key
        self.cause = cause
        super().__init__(
            code="TEMPLATE_EXECUTION_FAILED",
            message=f"Executing template '{key}' failed: {cause}",
            domain=FaultDomain.FLOW,
            severity=Severity.ERROR,
            retryable=False,
            public=False,
            metadata={
                "key": key,
                "error_type": type(cause).__name__,
                "_cause": cause,
                **kwargs.get("metadata", {}),
            },
        )


# ============================================================================
# SYSTEM Faults
# ============================================================================

class UnrecoverableFault(Fault):
    """Startup cannot continue."""
    
    def __init__(self, reason: str, **kwargs):
        super().__init__(
            code="UNRECOVERABLE",
            message=f"Unrecoverable fault: {reason}",
            domain=FaultDomain.SYSTEM,
            severity=Severity.FATAL,
            retryable=False,
            public=False,
            metadata={"reason": reason, **kwargs.get("metadata", {})},
        )
