"""
Reload controller - Owns the installed registry and rebuilds it.

Readers take the current registry reference without locking; a rebuild
builds a complete new registry and installs it with one assignment, so
a reader sees either the old registry or the new one in full.

At most one rebuild runs at a time. ``reload`` waits for its turn,
``try_reload`` gives up immediately if another rebuild is running.
Until a first registry is installed, readers wait for the running build.
"""

import logging
import threading
from typing import Callable, Optional

from .registry import TemplateRegistry


class ReloadController:
    """
    Args:
        build: Callable producing a new registry (raises BuildFault)
        always_reload: Rebuild opportunistically before every render
        logger: Logger for reload messages
    """

    def __init__(
        self,
        build: Callable[[], TemplateRegistry],
        *,
        always_reload: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self._build = build
        self.always_reload = always_reload
        self.logger = logger or logging.getLogger("vellum.reload")
        self._lock = threading.Lock()
        self._registry = TemplateRegistry.empty()
        self._generation = 0

    @property
    def registry(self) -> TemplateRegistry:
        """The installed registry."""
        return self._registry

    @property
    def generation(self) -> int:
        """Number of registries installed so far."""
        return self._generation

    def reload(self) -> TemplateRegistry:
        """
        Rebuild and install, waiting for a running rebuild to finish first.

        On failure the previous registry stays installed and the fault
        propagates.
        """
        with self._lock:
            return self._rebuild()

    def try_reload(self) -> bool:
        """
        Rebuild unless another rebuild is running.

        Returns:
            True if a rebuild ran, False if it was skipped
        """
        if not self._lock.acquire(blocking=False):
            self.logger.debug("Template rebuild already running, using installed registry")
            return False
        try:
            self._rebuild()
        finally:
            self._lock.release()
        return True

    def snapshot(self) -> TemplateRegistry:
        """
        Registry to render against, rebuilt first when always_reload is on.

        When another thread is running the first build, waits for it
        instead of returning the empty startup registry.
        """
        if self.always_reload and not self.try_reload() and self._generation == 0:
            with self._lock:
                # The first build failed: build again so the fault reaches this caller too.
                if self._generation == 0:
                    self._rebuild()
        return self._registry

    def _rebuild(self) -> TemplateRegistry:
        registry = self._build()
        self._registry = registry
        self._generation += 1
        self.logger.debug(f"Installed template registry #{self._generation} ({len(registry)} units)")
        return registry
