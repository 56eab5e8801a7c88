"""
Access control for administrator-only ledger operations.

The ledger does not authenticate callers. It asks an AccessControl
implementation whether an already-authenticated identity holds the
administrator role.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from vestledger.core.exceptions import UnauthorizedError


class AccessControl(ABC):
    """Answers role questions about caller identities."""

    @abstractmethod
    async def is_administrator(self, caller: str) -> bool:
        """Return True if ``caller`` may create, pause and delete schedules."""
        ...

    async def require_administrator(self, caller: str, action: str) -> None:
        """
        Raise unless ``caller`` is an administrator.

        Raises:
            UnauthorizedError: If the caller is not an administrator
        """
        if not await self.is_administrator(caller):
            raise UnauthorizedError(
                "Caller is not an administrator", caller=caller, action=action
            )


class StaticAccessControl(AccessControl):
    """
    Fixed set of administrator identities.

    Identities are compared case-insensitively so checksummed and lower-case
    EVM addresses match.
    """

    def __init__(self, administrators: Iterable[str]) -> None:
        self._administrators = {a.lower() for a in administrators}

    async def is_administrator(self, caller: str) -> bool:
        return caller.lower() in self._administrators

    def grant(self, identity: str) -> None:
        self._administrators.add(identity.lower())

    def revoke(self, identity: str) -> None:
        self._administrators.discard(identity.lower())
