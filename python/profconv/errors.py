"""Exceptions raised by profconv."""

__all__ = [
    "ProfconvError",
    "TraceFormatError",
    "ProfileFormatError",
]


class ProfconvError(Exception):
    pass


class TraceFormatError(ProfconvError):
    """The input is not a structurally valid trace document."""


class ProfileFormatError(ProfconvError):
    """The input is not a structurally valid canonical profile."""
