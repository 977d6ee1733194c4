import logging
from typing import Any

from .config_validator import get_required_env

logger = logging.getLogger(__name__)

KNOWN_GROQ_MODELS = [
    "llama-3.1-8b-instant",
    "llama-3.1-70b-versatile",
    "llama-3.3-70b-versatile",
    "mixtral-8x7b-32768",
]


def get_llm_instance(provider: str, model: str) -> Any:
    """
    Factory to return a ready-to-use chat model based on provider name.

    Low temperature: the ranker must answer with a strict JSON decision.

    :param provider: 'groq' or 'openai'
    :param model: LLM model name
    :return: LangChain chat model ready to pass to LLMRanker
    """
    provider = provider.lower()

    if provider == "groq":
        from langchain_groq import ChatGroq

        api_key = get_required_env(
            "GROQ_API_KEY",
            description="Groq API key for LLM (get from https://console.groq.com/keys)"
        )
        if model not in KNOWN_GROQ_MODELS:
            # Groq adds models often; an unknown name is not fatal
            logger.warning(f"Model '{model}' not in known Groq models: {KNOWN_GROQ_MODELS}")

        return ChatGroq(
            model=model,
            api_key=api_key,
            temperature=0.1,
            streaming=False,
        )

    elif provider == "openai":
        from langchain_openai import ChatOpenAI

        api_key = get_required_env(
            "OPENAI_API_KEY",
            description="OpenAI API key for LLM (get from https://platform.openai.com/api-keys)"
        )
        return ChatOpenAI(
            model=model,
            api_key=api_key,
            temperature=0.1,
            streaming=False,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")
