from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ActionMapperConfig:
    # Core paths
    knowledge_base_dir: str = "data/knowledge_base"
    page_object_repo_path: Optional[str] = None

    # Vector store
    faiss_index_path: Optional[str] = None
    embedding_provider: str = "openai"

    # LLM / Ranker
    llm_provider: str = "groq"
    llm_model: str = "llama-3.1-8b-instant"
    ranker_timeout_seconds: float = 30.0
    enable_intelligent_selection: bool = True
    enable_llm_fallback: bool = False

    # Thresholds
    learned_pattern_threshold: float = 0.6
    composite_threshold: float = 0.6
    atomic_threshold: float = 0.2
    semantic_good_enough: float = 0.4
    confidence_threshold: float = 0.3
    preferred_screen_boost: float = 0.1

    # Candidate gathering
    gather_timeout_seconds: float = 10.0
    max_semantic_variants: int = 5
    semantic_top_k: int = 5
    candidate_top_k: int = 15

    # Learning
    enable_write_back: bool = True
    record_patterns: bool = False

    # Performance
    warmup_on_start: bool = True
    verbose: bool = False
