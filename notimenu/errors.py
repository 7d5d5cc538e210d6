"""Shared error types for the notimenu package."""


class NotiMenuError(Exception):
    """Base exception for menu errors."""

    pass


class UrlPatternError(NotiMenuError):
    """The built-in URL pattern failed to compile.

    The pattern is fixed, so this points at a broken build rather than
    bad input and is never swallowed.
    """

    pass
