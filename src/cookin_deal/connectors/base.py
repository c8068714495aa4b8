"""Base connector interface for external collaborators."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)


@dataclass
class ConnectorResult:
    """Outcome of a collaborator call. Failures are data, never exceptions."""

    source: str
    success: bool = False
    errors: list[str] = field(default_factory=list)


class HTTPConnector(ABC):
    """
    Shared plumbing for HTTP collaborators (CRM webhook, valuation lookup, LLM).
    Every call has a timeout; ``transport`` lets tests inject httpx.MockTransport.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this collaborator."""
        ...

    def _client(self, **kwargs) -> httpx.Client:
        return httpx.Client(timeout=self.timeout_seconds, transport=self.transport, **kwargs)

    def _fail(self, result: ConnectorResult, message: str) -> ConnectorResult:
        """Record a non-fatal failure on ``result`` and log it."""
        logger.warning("%s: %s", self.source_name, message)
        result.success = False
        result.errors.append(message)
        return result
