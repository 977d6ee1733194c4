"""
Validation of incoming step payloads.

Step text ends up inside the ranker prompt, so it is length-bounded and
screened for prompt-injection phrasing before any Step is built.
"""

import re
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError
from ..models import SourceHint, Step


class StepValidator:
    """
    Turns untrusted request payloads into Step objects.

    Accepts camelCase (isPrerequisite, sourceHint) or snake_case keys.
    """

    MAX_STEPS = 100
    MAX_ACTION_LENGTH = 100
    MAX_TARGET_LENGTH = 200
    MAX_DETAILS_LENGTH = 500
    MAX_SCENARIO_LENGTH = 5000

    INJECTION_PATTERNS = [
        r"ignore\s+(all\s+)?(previous|above|all)\s+instructions?",
        r"(system|assistant|prompt)\s*:",
        r"you\s+are\s+now",
        r"forget\s+everything",
        r"disregard\s+(the\s+)?(above|previous)",
        r"override\s+(previous|above|all)",
        r"pretend\s+to\s+be",
        r"respond\s+with\s+(the\s+)?following\s+json",
    ]

    @staticmethod
    def clean_text(value: Any, max_length: int, field_name: str, required: bool = False) -> Optional[str]:
        """
        Validate one free-text field.

        :param value: Raw value from the payload
        :param max_length: Maximum allowed length
        :param field_name: Name of the field for error messages
        :param required: Reject missing or blank values
        :return: Stripped text, or None for an optional empty field
        :raises ValidationError: On wrong type, excess length or injection text
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                raise ValidationError(f"{field_name} must be a non-empty string")
            return None

        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if len(value) > max_length:
            raise ValidationError(f"{field_name} exceeds maximum length of {max_length} characters")

        for pattern in StepValidator.INJECTION_PATTERNS:
            if re.search(pattern, value, re.IGNORECASE):
                raise ValidationError(f"{field_name} contains potentially malicious content")

        return value.replace("\x00", "").strip()

    @staticmethod
    def validate_step(payload: Dict[str, Any]) -> Step:
        if not isinstance(payload, dict):
            raise ValidationError("Each step must be an object")

        action = StepValidator.clean_text(
            payload.get("action"), StepValidator.MAX_ACTION_LENGTH, "action", required=True
        )
        target = StepValidator.clean_text(payload.get("target"), StepValidator.MAX_TARGET_LENGTH, "target")
        details = StepValidator.clean_text(payload.get("details"), StepValidator.MAX_DETAILS_LENGTH, "details")

        is_prerequisite = payload.get("isPrerequisite", payload.get("is_prerequisite", False))
        if not isinstance(is_prerequisite, bool):
            raise ValidationError("isPrerequisite must be a boolean")

        raw_hint = payload.get("sourceHint", payload.get("source_hint")) or SourceHint.NONE.value
        try:
            hint = SourceHint(raw_hint)
        except ValueError:
            raise ValidationError(f"Unknown sourceHint: {raw_hint}")

        return Step(
            action=action,
            target=target,
            details=details,
            is_prerequisite=is_prerequisite or hint == SourceHint.PRECONDITION,
            source_hint=hint,
        )

    @staticmethod
    def validate_steps(payload: Any) -> List[Step]:
        """
        :param payload: List of step objects
        :return: Validated steps in order
        :raises ValidationError: If the list is missing, empty, too long or any step is invalid
        """
        if not isinstance(payload, list) or not payload:
            raise ValidationError("steps must be a non-empty list")
        if len(payload) > StepValidator.MAX_STEPS:
            raise ValidationError(f"At most {StepValidator.MAX_STEPS} steps per request")

        steps = []
        for i, item in enumerate(payload):
            try:
                steps.append(StepValidator.validate_step(item))
            except ValidationError as e:
                raise ValidationError(f"Step {i + 1}: {e}") from e
        return steps

    @staticmethod
    def validate_scenario(text: Any) -> Optional[str]:
        return StepValidator.clean_text(text, StepValidator.MAX_SCENARIO_LENGTH, "scenario")
