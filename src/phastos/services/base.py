"""Base class for request/response workflow services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .. import log
from .errors import ServiceFailure

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")


class BaseService(ABC, Generic[RequestT, ResultT]):
    """A workflow step sequence invoked as ``service(request)``.

    ``_run`` raises ``ServiceFailure`` when a step fails. ``__call__`` logs
    the failure and hands it to ``_handle_failure``, which re-raises unless a
    subclass converts it into a result.
    """

    def __call__(self, request: RequestT) -> ResultT:
        try:
            return self._run(request)
        except ServiceFailure as exc:
            log.debug(f"{type(self).__name__} failed ({exc.code}): {exc.message}")
            return self._handle_failure(exc)

    @abstractmethod
    def _run(self, request: RequestT) -> ResultT: ...

    def _handle_failure(self, error: ServiceFailure) -> ResultT:
        raise error
