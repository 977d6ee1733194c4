"""
Security module for request validation.

Step payloads are validated here before they reach the resolution engine
or the ranker prompt.
"""

from .exceptions import SecurityError, ValidationError
from .step_validator import StepValidator

__all__ = [
    "SecurityError",
    "ValidationError",
    "StepValidator",
]
