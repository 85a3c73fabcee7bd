"""
opsh_lib.client - Daemon client interface.

The shell talks to the daemon only through the Client methods below.
HttpClient is the JSON/HTTP implementation.
"""

from abc import ABC, abstractmethod
from typing import Optional


class Client(ABC):
    """Capabilities the shell needs from the daemon."""

    @abstractmethod
    def get_capabilities(self) -> list[dict]:
        """Modules the daemon implements, as [{"name", "revision"}]."""

    @abstractmethod
    def get_schema(self, name: str, revision: Optional[str] = None) -> str:
        """YANG source of one schema module."""

    @abstractmethod
    def get_running_config(self) -> dict:
        """Running configuration in JSON encoding."""

    @abstractmethod
    def get_state(self, path: Optional[str] = None) -> dict:
        """Operational state, optionally restricted to a data path."""

    @abstractmethod
    def commit(self, changes: list[dict], comment: Optional[str] = None) -> Optional[int]:
        """Apply changes atomically. Returns the transaction id, if any."""

    @abstractmethod
    def validate(self, config: dict) -> None:
        """Validate a full configuration without applying it."""

    @abstractmethod
    def execute_rpc(self, path: str, rpc_input: dict) -> dict:
        """Invoke an operational RPC and return its output."""


from .http import HttpClient  # noqa: E402

__all__ = ['Client', 'HttpClient']
