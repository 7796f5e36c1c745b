"""On-demand loading of named modules.

A :class:`DeferredUnit` stands in for a module that is only imported the first
time something needs it. Until then :meth:`DeferredUnit.get` hands back a
placeholder so callers can render something while it loads.
"""

import asyncio
import importlib
import logging
from types import ModuleType
from typing import Any

logger = logging.getLogger(__name__)


class DeferredUnit:
    def __init__(self, name: str):
        self.name = name
        self._module: ModuleType | None = None
        self._loading: asyncio.Task | None = None

    @property
    def resolved(self) -> bool:
        return self._module is not None

    def get(self, placeholder: Any = None) -> ModuleType | Any:
        return self._module if self._module is not None else placeholder

    async def resolve(self) -> ModuleType:
        if self._module is not None:
            return self._module
        if self._loading is None:
            self._loading = asyncio.ensure_future(asyncio.to_thread(importlib.import_module, self.name))
        try:
            self._module = await asyncio.shield(self._loading)
        except ImportError:
            self._loading = None
            logger.exception('Could not load %s', self.name)
            raise
        return self._module
