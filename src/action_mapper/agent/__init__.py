from .method_selector import LLMRanker
from .output_parser import RankerOutputParser

__all__ = ["LLMRanker", "RankerOutputParser"]
