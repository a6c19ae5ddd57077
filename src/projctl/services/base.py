"""BaseService: foundation for synchronous service facades.

Every service receives a :class:`Workbench` at construction time and
drives the asynchronous store through :meth:`BaseService._run`, one event
loop per call.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from projctl.infrastructure.workbench import Workbench

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ProjectService(BaseService):
            def list_projects(self) -> ServiceResult:
                projects = self._run(self.store.read_all_projects(...))
                ...
    """

    def __init__(self, workbench: Workbench) -> None:
        self._workbench = workbench

    @staticmethod
    def _run(coro: Coroutine[Any, Any, _T]) -> _T:
        """Run *coro* to completion on a fresh event loop."""
        return asyncio.run(coro)
