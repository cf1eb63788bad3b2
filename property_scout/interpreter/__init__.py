"""Natural-language query interpretation.

Main exports:
- QueryInterpreter: Free text -> FilterParameters, with rule-based fallback
- parse_query: The rule-based parser on its own
- LanguageModelClient, OpenAIClient: Remote interpreter providers
"""

from .interpreter import (
    SOURCE_LANGUAGE_MODEL,
    SOURCE_RULES,
    QueryInterpreter,
    parse_model_reply,
    strip_code_fence,
)
from .language_model import (
    CompletionRequest,
    LanguageModelClient,
    LanguageModelError,
    OpenAIClient,
)
from .rules import parse_query

__all__ = [
    "QueryInterpreter",
    "SOURCE_LANGUAGE_MODEL",
    "SOURCE_RULES",
    "parse_query",
    "parse_model_reply",
    "strip_code_fence",
    "CompletionRequest",
    "LanguageModelClient",
    "LanguageModelError",
    "OpenAIClient",
]
