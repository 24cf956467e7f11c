"""
Config system - Layered typed configuration for the template engine.

Merge precedence (later overrides earlier):
defaults < config files (JSON/YAML) < .env file < environment variables < overrides
"""

from typing import Any, Dict, Optional, get_type_hints
from dataclasses import dataclass, fields, replace
from pathlib import Path
import os
import json

from dotenv import dotenv_values

from .faults import ConfigInvalidFault


@dataclass(frozen=True)
class TemplatesConfig:
    """
    Template engine configuration.

    Attributes:
        templates_path: Root directory holding the layouts/pages/blocks folders
        layouts_path: Layouts folder, relative to the root
        pages_path: Pages folder, relative to the root
        blocks_path: Blocks folder, relative to the root
        file_extension: Extension of template files (with leading dot)
        default_layout: Layout used when a name carries none
        always_reload: Rebuild the registry before every render (development)
        add_helpers: Inject d_block, locals, references and trusted_* helpers
        disable_autoescape: Turn off autoescaping; trusted_* become pass-through
        disable_trusted_log: Silence the audit log of the *_ctx helpers
        sandbox: Run templates in a sandboxed Jinja2 environment
        log_preview_length: Characters of content kept in audit log entries
    """

    templates_path: str = "templates"
    layouts_path: str = "layouts"
    pages_path: str = "pages"
    blocks_path: str = "blocks"
    file_extension: str = ".html"
    default_layout: str = "application"
    always_reload: bool = False
    add_helpers: bool = True
    disable_autoescape: bool = False
    disable_trusted_log: bool = False
    sandbox: bool = True
    log_preview_length: int = 64

    def __post_init__(self):
        if not self.file_extension.startswith("."):
            raise ConfigInvalidFault("file_extension", "must start with '.'")
        if not self.default_layout or ":" in self.default_layout:
            raise ConfigInvalidFault("default_layout", "must be a non-empty name without ':'")
        if self.log_preview_length < 0:
            raise ConfigInvalidFault("log_preview_length", "must not be negative")

    @classmethod
    def development(cls, **kwargs) -> "TemplatesConfig":
        """Config for development: registry rebuilt on every render."""
        return cls(always_reload=True, **kwargs)

    @classmethod
    def production(cls, **kwargs) -> "TemplatesConfig":
        """Config for production: registry built once at startup."""
        return cls(always_reload=False, **kwargs)

    def with_overrides(self, **kwargs) -> "TemplatesConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "VELLUM_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "TemplatesConfig":
        """Shortcut for ``ConfigLoader.load(...).to_config()``."""
        return ConfigLoader.load(
            paths=paths,
            env_prefix=env_prefix,
            env_file=env_file,
            overrides=overrides,
        ).to_config()


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults

    Config files may be JSON or YAML. Values may sit at the top level or
    under a ``templates`` section.
    """

    def __init__(self, env_prefix: str = "VELLUM_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "VELLUM_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader.config_data.update(overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        from glob import glob

        for path_str in sorted(glob(pattern)):
            path = Path(path_str)

            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            self._merge_section(json.load(f))

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_section(data)

    def _merge_section(self, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise ConfigInvalidFault("<file>", "top level must be a mapping")
        section = data.get("templates", data)
        if isinstance(section, dict):
            self.config_data.update(section)

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        if not Path(path).exists():
            return

        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set(key, value)

    def _set(self, key: str, value: str):
        """Convert VELLUM_DEFAULT_LAYOUT to default_layout."""
        name = key[len(self.env_prefix):].lower()
        self.config_data[name] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        return self.config_data.get(key, default)

    def to_config(self) -> TemplatesConfig:
        """Instantiate and validate a TemplatesConfig from the merged data."""
        hints = get_type_hints(TemplatesConfig)
        kwargs = {}

        for field_info in fields(TemplatesConfig):
            name = field_info.name
            if name not in self.config_data:
                continue

            value = self._coerce(name, self.config_data[name], hints[name])
            kwargs[name] = value

        return TemplatesConfig(**kwargs)

    def _coerce(self, name: str, value: Any, expected: type) -> Any:
        # Numeric-looking env values for string fields are turned back into str.
        if expected is str and isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if expected is bool and isinstance(value, int) and not isinstance(value, bool) and value in (0, 1):
            return bool(value)
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigInvalidFault(
                name,
                f"expected {expected.__name__}, got {type(value).__name__}",
            )
        return value
