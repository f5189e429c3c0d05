"""OpenAI-compatible chat client.

Sends one system + user message pair to a chat-completion endpoint
(OpenRouter by default) and returns the generated text. Failures are mapped
onto docqa exceptions so callers can tell network trouble from credential
problems from empty payloads. Calls are not retried.
"""

import logging
from typing import Any, Optional

from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    AuthenticationError,
    OpenAI,
    PermissionDeniedError,
)

from docqa.config import get_settings
from docqa.exceptions import (
    ConfigurationMissingError,
    MalformedResponseError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)


class ChatProvider:
    """Chat-completion capability."""

    def complete(self, system: str, user: str) -> str:
        """Generate a reply for one system/user message pair."""
        raise NotImplementedError


class OpenAIChatClient(ChatProvider):
    """Client for OpenAI-compatible chat models.

    The underlying SDK client is created on first use, so a missing key is
    reported when an answer is actually requested.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[Any] = None,
    ) -> None:
        """Initialize chat client.

        Args:
            api_key: API key (from config if omitted)
            model: Model name (from config if omitted)
            base_url: Endpoint base URL (from config if omitted)
            temperature: Sampling temperature (from config if omitted)
            max_tokens: Completion token cap (from config if omitted)
            timeout: Request timeout in seconds (from config if omitted)
            client: Pre-built SDK client, mainly for tests
        """
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.CHAT_MODEL
        self.base_url = base_url or settings.OPENAI_BASE_URL
        self.temperature = temperature if temperature is not None else settings.CHAT_TEMPERATURE
        self.max_tokens = max_tokens if max_tokens is not None else settings.CHAT_MAX_TOKENS
        self.timeout = timeout if timeout is not None else settings.CHAT_TIMEOUT
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise ConfigurationMissingError(
                    "Chat API key is not configured", config_key="OPENAI_API_KEY"
                )
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
            logger.info(f"Chat client initialized (model: {self.model}, base_url: {self.base_url})")
        return self._client

    def complete(self, system: str, user: str) -> str:
        """Send one chat request.

        Args:
            system: System instructions
            user: User message (context + question)

        Returns:
            str: Model reply

        Raises:
            ConfigurationMissingError: If the key is missing or rejected
            ProviderUnavailableError: On network, timeout or API errors
            MalformedResponseError: If the reply has no text
        """
        client = self._get_client()
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]

        try:
            logger.info(f"Calling chat model {self.model} (prompt: {len(user)} chars)")
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            logger.error(f"Chat API rejected credentials: {e}")
            raise ConfigurationMissingError(
                f"Chat API rejected credentials: {e}", config_key="OPENAI_API_KEY"
            ) from e
        except APIConnectionError as e:
            logger.error(f"Chat API unreachable: {e}")
            raise ProviderUnavailableError(f"Chat API unreachable: {e}") from e
        except APIStatusError as e:
            logger.error(f"Chat API error: {e}")
            raise ProviderUnavailableError(
                f"Chat API error: {e}", status_code=e.status_code
            ) from e
        except APIError as e:
            logger.error(f"Chat API error: {e}")
            raise ProviderUnavailableError(f"Chat API error: {e}") from e

        try:
            result = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError(f"Unexpected chat response shape: {e}") from e

        if not result:
            raise MalformedResponseError("Empty response from chat API")

        logger.info(f"Chat completed ({len(result)} chars)")
        return result
