"""
LLM-backed ranker.

Wraps any LangChain chat model behind the Ranker and ReasoningBackend
protocols: builds the prompt, enforces a timeout and parses the JSON reply.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from langchain_core.messages import HumanMessage, SystemMessage

from .output_parser import RankerOutputParser
from .prompts import FALLBACK_PROMPT, SELECTION_PROMPT, format_candidates, system_prompt_for
from ..models import Candidate, Step
from ..tools.ranker_tool import FallbackAnswer, RankerResponse

logger = logging.getLogger(__name__)


class LLMRanker:
    """
    Chooses among gathered candidates with a chat model.

    Timeouts and transport errors propagate to the caller; malformed
    replies raise RankerResponseError.
    """

    def __init__(self, llm, timeout_seconds: float = 30.0, max_candidates: int = 15):
        """
        :param llm: LangChain chat model (anything with invoke(messages))
        :param timeout_seconds: Upper bound for one model call
        :param max_candidates: Candidates shown to the model
        """
        self._llm = llm
        self._timeout = timeout_seconds
        self._max_candidates = max_candidates
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="ranker")

    def select(
        self,
        step: Step,
        candidates: List[Candidate],
        context: Dict[str, Any],
    ) -> RankerResponse:
        platform = context.get("platform")
        prompt = SELECTION_PROMPT.format(
            action=step.action,
            target=step.target or "none",
            details=step.details or "none",
            platform=platform or "unknown",
            scenario=f"Full Scenario: {context['full_scenario']}\n" if context.get("full_scenario") else "",
            screen_context=self._screen_context(context),
            candidates=format_candidates(candidates, self._max_candidates),
        )
        text = self._invoke(system_prompt_for(platform), prompt)
        response = RankerOutputParser.parse(text, [c.method_name for c in candidates])
        logger.debug(f"Ranker decision for '{step.action} {step.target or ''}': {response.decision.value}")
        return response

    def reason(self, step: Step, context: Dict[str, Any]) -> FallbackAnswer:
        prompt = FALLBACK_PROMPT.format(
            action=step.action,
            target=step.target or "none",
            details=step.details or "none",
            platform=context.get("platform") or "unknown",
        )
        text = self._invoke("You are a test automation expert. Respond with JSON only.", prompt)
        return RankerOutputParser.parse_fallback(text)

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def _invoke(self, system: str, prompt: str) -> str:
        messages = [SystemMessage(content=system), HumanMessage(content=prompt)]
        future = self._executor.submit(self._llm.invoke, messages)
        result = future.result(timeout=self._timeout)
        return getattr(result, "content", result) or ""

    @staticmethod
    def _screen_context(context: Dict[str, Any]) -> str:
        parts = []
        if context.get("current_screen"):
            parts.append(f"Current Screen: {context['current_screen']}")
        if context.get("screen_path"):
            parts.append(f"Navigation Path: {' -> '.join(context['screen_path'])}")
        if context.get("preferred_screen_class"):
            parts.append(f"Preferred Class: {context['preferred_screen_class']}")
        if not parts:
            return ""
        return "\nSCREEN CONTEXT:\n" + "\n".join(parts)
