"""Exception hierarchy for the Zerto RPO check.

Each stage of the check raises its own subclass so the CLI can report
which stage failed.
"""


class ZertoError(Exception):
    """Base exception for Zerto RPO check errors."""
    stage = "check"


class ConfigError(ZertoError):
    """Exception raised when credentials or settings cannot be loaded."""
    stage = "config"


class AuthError(ZertoError):
    """Exception raised when the ZVM login fails."""
    stage = "login"


class QueryError(ZertoError):
    """Exception raised when the VPG query or its decoding fails."""
    stage = "query"
