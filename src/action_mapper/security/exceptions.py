"""
Errors raised while screening incoming step payloads.

The HTTP layer turns these into 400 responses; they never reach the
resolution engine.
"""


class SecurityError(Exception):
    """A request payload was refused before any step was built."""


class ValidationError(SecurityError):
    """A step field or request option failed validation."""
