import json
import re
from typing import Any, Dict, Iterable, Optional

from ..exceptions import RankerResponseError
from ..models import clamp_confidence
from ..tools.ranker_tool import FallbackAnswer, RankerDecision, RankerResponse, SelectedMethod

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_BARE_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_NO_MATCH_MARKERS = ("create_new", "no suitable", "none of", "no match")

# Confidence given to a method name recovered from prose
PROSE_MATCH_CONFIDENCE = 0.7


class RankerOutputParser:
    @staticmethod
    def extract_json(text: str) -> Dict[str, Any]:
        """
        Pull the JSON object out of a model reply.

        Handles markdown fences and leading/trailing chatter.
        """
        match = _FENCED_JSON.search(text)
        raw = match.group(1) if match else text
        try:
            parsed = json.loads(raw.strip())
        except ValueError:
            bare = _BARE_OBJECT.search(raw)
            if not bare:
                raise
            parsed = json.loads(bare.group(0))
        if not isinstance(parsed, dict):
            raise ValueError("Expected a JSON object")
        return parsed

    @classmethod
    def parse(cls, text: str, candidate_names: Optional[Iterable[str]] = None) -> RankerResponse:
        """
        Parses a selection reply into a RankerResponse.

        Falls back to scanning prose for CREATE_NEW markers or a candidate
        name when the reply is not valid JSON.

        :param text: Raw model output
        :param candidate_names: Method names offered to the model
        :raises RankerResponseError: If nothing usable can be recovered
        """
        if not text or not text.strip():
            raise RankerResponseError("Empty ranker response")

        try:
            data = cls.extract_json(text)
        except ValueError:
            return cls._parse_prose(text, candidate_names or [])

        try:
            decision = RankerDecision(str(data.get("decision", "")).upper())
        except ValueError:
            raise RankerResponseError(f"Unknown decision: {data.get('decision')!r}")

        selected = []
        for item in data.get("selectedMethods") or []:
            if not isinstance(item, dict) or not item.get("methodName"):
                continue
            selected.append(SelectedMethod(
                method_name=str(item["methodName"]),
                class_name=item.get("className"),
                reason=item.get("reason"),
            ))

        if decision == RankerDecision.SELECT and not selected:
            raise RankerResponseError("SELECT decision without selected methods")

        confidence = data.get("confidence")
        return RankerResponse(
            decision=decision,
            selected_methods=selected,
            confidence=clamp_confidence(confidence) if confidence is not None else None,
            reasoning=data.get("reasoning"),
        )

    @staticmethod
    def _parse_prose(text: str, candidate_names: Iterable[str]) -> RankerResponse:
        lowered = text.lower()
        if any(marker in lowered for marker in _NO_MATCH_MARKERS):
            return RankerResponse(decision=RankerDecision.CREATE_NEW, reasoning=text.strip()[:200])

        for name in candidate_names:
            if name and name in text:
                return RankerResponse(
                    decision=RankerDecision.SELECT,
                    selected_methods=[SelectedMethod(method_name=name)],
                    confidence=PROSE_MATCH_CONFIDENCE,
                )

        raise RankerResponseError("Could not parse ranker response")

    @classmethod
    def parse_fallback(cls, text: str) -> FallbackAnswer:
        """Parses a free-form reasoning reply; anything unparseable is not found."""
        try:
            data = cls.extract_json(text or "")
        except ValueError:
            return FallbackAnswer(found=False, reasoning="Unparseable reasoning response")

        method_name = data.get("methodName")
        class_name = data.get("className")
        found = bool(data.get("found")) and bool(method_name) and bool(class_name)
        return FallbackAnswer(
            found=found,
            method_name=method_name,
            class_name=class_name,
            confidence=clamp_confidence(data.get("confidence"), default=0.5),
            parameters=[str(p) for p in data.get("parameters") or []],
            reasoning=data.get("reasoning"),
        )
