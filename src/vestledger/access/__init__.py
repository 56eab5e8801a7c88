"""Access control collaborators."""

from vestledger.access.control import AccessControl, StaticAccessControl

__all__ = ["AccessControl", "StaticAccessControl"]
