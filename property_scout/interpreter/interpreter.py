"""Query interpreter with automatic fallback from language model to rules."""

import json
import logging
import re
from typing import Optional, Tuple

from pydantic import ValidationError

from property_scout.config import Settings, settings as default_settings
from property_scout.validation import FilterParameters

from .language_model import CompletionRequest, LanguageModelClient, LanguageModelError
from .rules import parse_query

logger = logging.getLogger(__name__)

SOURCE_LANGUAGE_MODEL = "language_model"
SOURCE_RULES = "rules"

SYSTEM_INSTRUCTION = """Convert natural language property searches to API parameters.
Return JSON with: city, state, minPrice, maxPrice, minBedrooms, maxBedrooms, propertyType.
state is a two-letter code. propertyType is one of "Single Family", "Condo", "Townhouse", "Multi-Family".
Omit any field the search does not mention. Respond with the JSON object only.
Example: "3 bedroom house under 400k in Austin TX" -> {"city":"Austin","state":"TX","maxPrice":400000,"minBedrooms":3,"propertyType":"Single Family"}"""

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove an optional ```json ... ``` wrapper around a model reply."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def parse_model_reply(text: str) -> FilterParameters:
    """Parse a model reply into filters.

    Raises:
        ValueError: If the reply is not a JSON object of valid filters
    """
    data = json.loads(strip_code_fence(text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return FilterParameters.model_validate(data)


class QueryInterpreter:
    """Turns free-text searches into FilterParameters.

    Tries the language model first when one is configured, and falls back
    to the rule-based parser on any failure. ``interpret`` never raises.

    Usage:
        interpreter = QueryInterpreter()
        filters = interpreter.interpret("3 bedroom house under 400k in Austin, TX")
    """

    def __init__(
        self,
        language_model: Optional[LanguageModelClient] = None,
        config: Optional[Settings] = None,
    ):
        """Initialize interpreter.

        Args:
            language_model: Optional remote interpreter; rules only if None
            config: Settings carrying model name, max tokens and temperature
        """
        self.language_model = language_model
        self.config = config or default_settings

    @property
    def uses_language_model(self) -> bool:
        return self.language_model is not None

    def interpret(self, text: str) -> FilterParameters:
        """Interpret a search phrase.

        Args:
            text: Free-text search phrase

        Returns:
            FilterParameters, possibly empty
        """
        filters, _ = self.interpret_with_source(text)
        return filters

    def interpret_with_source(self, text: str) -> Tuple[FilterParameters, str]:
        """Interpret a search phrase and report which path produced the filters.

        Returns:
            (filters, source) where source is SOURCE_LANGUAGE_MODEL or SOURCE_RULES
        """
        if self.language_model is not None:
            try:
                filters = self._interpret_remote(text)
                logger.info(f"Language model interpreted query: {filters.to_params()}")
                return filters, SOURCE_LANGUAGE_MODEL
            except (LanguageModelError, ValidationError, ValueError) as e:
                logger.warning(f"Language model interpretation failed, using rules: {e}")
            except Exception as e:
                logger.error(f"Unexpected language model error, using rules: {e}")

        try:
            filters = parse_query(text)
        except Exception as e:
            logger.error(f"Rule-based interpretation failed for {text!r}: {e}")
            return FilterParameters(), SOURCE_RULES

        logger.info(f"Rule-based interpretation: {filters.to_params()}")
        return filters, SOURCE_RULES

    def _interpret_remote(self, text: str) -> FilterParameters:
        request = CompletionRequest(
            system_instruction=SYSTEM_INSTRUCTION,
            user_text=text,
            model_name=self.config.ai_model,
            max_tokens=self.config.ai_max_tokens,
            temperature=self.config.ai_temperature,
        )
        reply = self.language_model.complete(request)
        return parse_model_reply(reply)
