"""Exception hierarchy shared by pipelines and handlers."""

from __future__ import annotations


class CallbriefError(Exception):
    """Base class for all callbrief errors."""


class InvalidRequestError(CallbriefError):
    """The request is missing a required field or is malformed."""


class OracleConfigurationError(CallbriefError):
    """An external oracle cannot be used because credentials are missing."""


class OracleError(CallbriefError):
    """An external oracle raised or returned an unusable response."""
