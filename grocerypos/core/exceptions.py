"""
Application-level errors raised before any backend call is made.
"""


class ValidationError(ValueError):
    """Malformed or missing user input; the action is blocked."""


class AuthorizationError(Exception):
    """The signed-in profile may not perform the requested action."""
