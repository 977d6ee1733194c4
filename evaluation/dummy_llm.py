import json
import re
from typing import Any, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult

_FIRST_CANDIDATE = re.compile(r"^1\.\s+(?:\[COMPOSITE\]\s+)?(\w+)\s*\n\s+Class:\s+(\w+)", re.MULTILINE)


class DummyChatModel(BaseChatModel):
    """
    LangChain-compatible chat model for offline evaluation.

    Answers a selection prompt by picking the first listed candidate, and
    CREATE_NEW when no candidates were offered. Fallback prompts get a
    not-found answer.
    """

    @property
    def _llm_type(self) -> str:
        return "dummy-chat"

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[Any] = None,
        **kwargs: Any,
    ) -> ChatResult:
        prompt = str(messages[-1].content) if messages else ""
        generation = ChatGeneration(message=AIMessage(content=self._answer(prompt)))
        return ChatResult(generations=[generation])

    async def _agenerate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[Any] = None,
        **kwargs: Any,
    ) -> ChatResult:
        return self._generate(messages, stop=stop, run_manager=run_manager, **kwargs)

    @staticmethod
    def _answer(prompt: str) -> str:
        if "CANDIDATE METHODS" not in prompt:
            return json.dumps({"found": False, "confidence": 0.0, "reasoning": "offline model"})

        match = _FIRST_CANDIDATE.search(prompt)
        if not match:
            return json.dumps({
                "decision": "CREATE_NEW",
                "selectedMethods": [],
                "confidence": 0.0,
                "reasoning": "No candidates offered",
            })
        return json.dumps({
            "decision": "SELECT",
            "selectedMethods": [{"methodName": match.group(1), "className": match.group(2)}],
            "confidence": 0.9,
            "reasoning": "Top ranked candidate",
        })
