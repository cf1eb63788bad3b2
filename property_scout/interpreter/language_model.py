"""Language model clients for remote query interpretation.

The interpreter depends only on LanguageModelClient, so a different
provider can be dropped in without touching the parsing code.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from property_scout.config import Settings, settings as default_settings
from property_scout.listings.base import RemoteUnavailable

logger = logging.getLogger(__name__)


class LanguageModelError(RemoteUnavailable):
    """Raised when the language model call fails or returns nothing usable."""
    pass


@dataclass
class CompletionRequest:
    """Provider-neutral chat completion request."""
    system_instruction: str
    user_text: str
    model_name: str
    max_tokens: int = 150
    temperature: float = 0.1


class LanguageModelClient(ABC):
    """Base class for language model providers."""

    provider_name: str = "base"

    @abstractmethod
    def complete(self, request: CompletionRequest) -> str:
        """Return the raw text of the model's reply.

        Raises:
            LanguageModelError: If the call fails or the reply is empty
        """
        pass


class OpenAIClient(LanguageModelClient):
    """OpenAI chat completions provider."""

    provider_name = "openai"

    def __init__(self, config: Optional[Settings] = None, client=None):
        """Initialize the provider.

        Args:
            config: Settings carrying the API key and timeout
            client: Optional preconfigured ``openai.OpenAI`` instance
        """
        self.config = config or default_settings

        if client is None:
            # Lazy import to avoid dependency issues at module load time
            from openai import OpenAI

            if not self.config.has_language_model:
                raise LanguageModelError("OPENAI_API_KEY not configured")

            # Single attempt: fall back to rules instead of retrying
            client = OpenAI(
                api_key=self.config.openai_api_key,
                timeout=self.config.response_timeout,
                max_retries=0,
            )

        self._client = client
        logger.info(f"OpenAIClient initialized (model={self.config.ai_model})")

    def complete(self, request: CompletionRequest) -> str:
        try:
            response = self._client.chat.completions.create(
                model=request.model_name,
                messages=[
                    {"role": "system", "content": request.system_instruction},
                    {"role": "user", "content": request.user_text},
                ],
                max_tokens=request.max_tokens,
                temperature=request.temperature,
            )
        except Exception as e:
            raise LanguageModelError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise LanguageModelError("OpenAI returned no choices")

        text = response.choices[0].message.content or ""
        if not text.strip():
            raise LanguageModelError("OpenAI returned an empty reply")
        return text.strip()
