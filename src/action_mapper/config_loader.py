"""
Configuration loader with validation.

Builds an immutable ActionMapperConfig from environment variables.
"""
from dotenv import load_dotenv
from .config import ActionMapperConfig
from .config_validator import (
    get_optional_env,
    get_bool_env,
    get_float_env,
    get_int_env,
    validate_existing_path,
    validate_threshold,
)


def load_config_from_env(load_env_file: bool = True) -> ActionMapperConfig:
    """
    Load configuration from environment variables with validation.
    
    Usage:
        config = load_config_from_env()
        app = ActionMapperApp(config)
        app.initialize()
    
    :param load_env_file: Whether to read a local .env file first
    :return: Validated ActionMapperConfig instance
    :raises: ConfigurationError if values are missing or invalid
    """
    if load_env_file:
        load_dotenv()
    
    config = ActionMapperConfig(
        knowledge_base_dir=get_optional_env(
            "KNOWLEDGE_BASE_DIR",
            default="data/knowledge_base"
        ),
        page_object_repo_path=get_optional_env("PAGE_OBJECT_REPO_PATH"),
        faiss_index_path=get_optional_env("VECTOR_STORE_PATH"),
        embedding_provider=get_optional_env("EMBEDDING_PROVIDER", default="openai").lower(),
        llm_provider=get_optional_env("LLM_PROVIDER", default="groq"),
        llm_model=get_optional_env("LLM_MODEL", default="llama-3.1-8b-instant"),
        ranker_timeout_seconds=get_float_env("RANKER_TIMEOUT_SECONDS", 30.0),
        enable_intelligent_selection=get_bool_env("ENABLE_INTELLIGENT_SELECTION", True),
        enable_llm_fallback=get_bool_env("ENABLE_LLM_FALLBACK", False),
        learned_pattern_threshold=validate_threshold(
            get_float_env("LEARNED_PATTERN_THRESHOLD", 0.6), "LEARNED_PATTERN_THRESHOLD"
        ),
        composite_threshold=validate_threshold(
            get_float_env("COMPOSITE_THRESHOLD", 0.6), "COMPOSITE_THRESHOLD"
        ),
        atomic_threshold=validate_threshold(
            get_float_env("ATOMIC_THRESHOLD", 0.2), "ATOMIC_THRESHOLD"
        ),
        semantic_good_enough=validate_threshold(
            get_float_env("SEMANTIC_GOOD_ENOUGH", 0.4), "SEMANTIC_GOOD_ENOUGH"
        ),
        confidence_threshold=validate_threshold(
            get_float_env("CONFIDENCE_THRESHOLD", 0.3), "CONFIDENCE_THRESHOLD"
        ),
        preferred_screen_boost=get_float_env("PREFERRED_SCREEN_BOOST", 0.1),
        gather_timeout_seconds=get_float_env("GATHER_TIMEOUT_SECONDS", 10.0),
        max_semantic_variants=get_int_env("MAX_SEMANTIC_VARIANTS", 5),
        enable_write_back=get_bool_env("ENABLE_WRITE_BACK", True),
        record_patterns=get_bool_env("RECORD_PATTERNS", False),
        warmup_on_start=get_bool_env("WARMUP_ON_START", True),
        verbose=get_bool_env("VERBOSE", False),
    )
    
    if config.page_object_repo_path:
        validate_existing_path(config.page_object_repo_path, "PAGE_OBJECT_REPO_PATH")
    
    return config
