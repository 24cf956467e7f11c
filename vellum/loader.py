"""
Template sources - Where template files come from.

A source lists the files of one directory and reads a file's text. Every
source reads through a Jinja2 loader:

- FileSystemSource: a directory on disk (jinja2.FileSystemLoader)
- PackageSource: resources shipped inside a Python package (jinja2.PackageLoader)
- MemorySource: an in-memory mapping, mostly for tests (jinja2.DictLoader)
"""

from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Set, Tuple
import posixpath

from jinja2 import BaseLoader, TemplateNotFound
from jinja2.loaders import DictLoader, FileSystemLoader, PackageLoader

from .faults import TemplateDirectoryMissingFault, TemplateReadFault


def clean_path(path: str) -> str:
    """Normalize a slash-separated relative path ("./pages/" -> "pages")."""
    cleaned = posixpath.normpath(path.replace("\\", "/")).strip("/")
    return "" if cleaned == "." else cleaned


class TemplateSource(ABC):
    """
    Base class for template sources.

    Paths handed out by ``list_files`` are relative to the source root
    and are accepted back by ``read``.
    """

    loader: BaseLoader

    @abstractmethod
    def has_directory(self, directory: str) -> bool:
        """Whether ``directory`` exists in this source."""

    def list_files(self, directory: str, extension: str) -> List[str]:
        """
        List files directly inside ``directory`` ending in ``extension``.

        Subdirectories are not descended into.

        Raises:
            TemplateDirectoryMissingFault: If the directory does not exist
        """
        directory = clean_path(directory)
        if not self.has_directory(directory):
            raise TemplateDirectoryMissingFault(directory)

        prefix = f"{directory}/" if directory else ""
        files = []
        for name in self.loader.list_templates():
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix):]
            if "/" in rest:
                continue
            if posixpath.splitext(rest)[1] == extension:
                files.append(name)

        return sorted(files)

    def read(self, path: str) -> Tuple[str, str]:
        """
        Read a template file.

        Returns:
            Tuple of (source text, filename for error messages)

        Raises:
            TemplateReadFault: If the file cannot be read
        """
        try:
            source, filename, _ = self.loader.get_source(None, path)
        except TemplateNotFound as exc:
            raise TemplateReadFault(path, "file not found") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateReadFault(path, str(exc)) from exc
        return source, filename or path


class FileSystemSource(TemplateSource):
    """
    Templates in a directory on disk.

    Args:
        root: Directory holding the layouts/pages/blocks folders
        encoding: File encoding
    """

    def __init__(self, root: str, encoding: str = "utf-8"):
        self.root = Path(root)
        self.loader = FileSystemLoader(str(self.root), encoding=encoding)

    def has_directory(self, directory: str) -> bool:
        return (self.root / directory).is_dir()

    def __repr__(self) -> str:
        return f"FileSystemSource({str(self.root)!r})"


class PackageSource(TemplateSource):
    """
    Templates shipped as package resources.

    Args:
        package: Importable package name
        package_path: Folder inside the package holding the templates
    """

    def __init__(self, package: str, package_path: str = "templates", encoding: str = "utf-8"):
        self.package = package
        self.package_path = clean_path(package_path)
        try:
            self.loader = PackageLoader(package, self.package_path, encoding=encoding)
        except ValueError as exc:
            raise TemplateDirectoryMissingFault(f"{package}:{self.package_path}") from exc

    def has_directory(self, directory: str) -> bool:
        root = resources.files(self.package)
        if self.package_path:
            root = root.joinpath(self.package_path)
        if directory:
            root = root.joinpath(directory)
        return root.is_dir()

    def __repr__(self) -> str:
        return f"PackageSource({self.package!r}, {self.package_path!r})"


class MemorySource(TemplateSource):
    """
    Templates held in a dict of path -> source text.

    Directories are inferred from the paths. Pass ``directories`` to
    declare directories that hold no files.

    Example:
        source = MemorySource({
            "layouts/application.html": "{% macro layout(data) %}...{% endmacro %}",
            "pages/home.html": "{% macro page(data) %}...{% endmacro %}",
        }, directories=["blocks"])
    """

    def __init__(self, mapping: Mapping[str, str], directories: Iterable[str] = ()):
        self.mapping = {clean_path(path): text for path, text in mapping.items()}
        self.loader = DictLoader(self.mapping)
        self._directories: Set[str] = {""}
        for directory in directories:
            self._add_directory(clean_path(directory))
        for path in self.mapping:
            self._add_directory(posixpath.dirname(path))

    def _add_directory(self, directory: str) -> None:
        while directory:
            self._directories.add(directory)
            directory = posixpath.dirname(directory)

    def has_directory(self, directory: str) -> bool:
        return directory in self._directories

    def __repr__(self) -> str:
        return f"MemorySource({len(self.mapping)} files)"


def create_source(root: Optional[str] = None, package: Optional[str] = None) -> TemplateSource:
    """Build a FileSystemSource or, when ``package`` is given, a PackageSource."""
    if package:
        return PackageSource(package, root or "templates")
    return FileSystemSource(root or "templates")
