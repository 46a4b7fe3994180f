"""Exception types shared by the exam portal core."""

from __future__ import annotations


class PortalError(Exception):
    """Base class for portal errors."""


class NotFound(PortalError):
    """Raised when a test or its questions cannot be found."""


class PersistenceError(PortalError):
    """Raised when the record store fails to read or write."""


class ValidationError(PortalError):
    """Raised when a session operation is called out of contract."""


class TestImportError(PortalError):
    """Raised when a test definition file cannot be parsed."""

    __test__ = False
