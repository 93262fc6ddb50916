"""Text completion transport.

Public API:
    - CompletionClient: Provider-agnostic async completion client
    - CompletionError: Transport/provider failure
    - LLMConfig: Provider and request defaults
"""

from src.llm.client import CompletionClient, CompletionError
from src.llm.config import DEFAULT_SYSTEM_PROMPT, LLMConfig
from src.llm.parsing import extract_json_block, strip_code_fences

__all__ = [
    "CompletionClient",
    "CompletionError",
    "LLMConfig",
    "DEFAULT_SYSTEM_PROMPT",
    "extract_json_block",
    "strip_code_fences",
]
