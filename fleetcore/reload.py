"""Passing a new configuration to every component that can take one."""

from __future__ import annotations

from typing import Any, Protocol


class Reloadable(Protocol):
    def reload(self, config: Any) -> None: ...


class ReloadManager:
    """Reloads its managers in order, stopping at the first that raises."""

    def __init__(self, *managers: Reloadable) -> None:
        self._managers = list(managers)

    def reload(self, config: Any) -> None:
        """Hand ``config`` to each manager in turn."""
        for manager in self._managers:
            manager.reload(config)