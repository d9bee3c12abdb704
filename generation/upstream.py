"""
Upstream text-completion client.
"""
from typing import Any, Optional
import logging
from openai import OpenAI, APIError

from config.settings import Settings, is_placeholder_key
from exceptions import ConfigurationMissing, UpstreamUnavailable

logger = logging.getLogger(__name__)


class UpstreamClient:
    """
    Sends one composed prompt to an OpenAI-compatible chat-completions endpoint.

    Features:
    - Credential check before any network activity
    - Fixed generation parameters (temperature, top-p, top-k, max tokens)
    - Lazy SDK client creation
    - Every transport or API failure surfaced as UpstreamUnavailable
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        top_p: float = 0.9,
        top_k: int = 40,
        max_output_tokens: int = 2048,
        timeout: int = 60,
        client: Optional[Any] = None
    ):
        """
        Initialize upstream client.

        Args:
            model: Upstream model name
            api_key: Upstream API key; absent or placeholder disables the client
            base_url: OpenAI-compatible endpoint
            temperature: Sampling temperature
            top_p: Nucleus sampling threshold
            top_k: Top-k sampling, sent as an extra body field
            max_output_tokens: Completion token cap
            timeout: Request timeout in seconds
            client: Pre-built SDK client (mainly for tests)
        """
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.temperature = temperature
        self.top_p = top_p
        self.top_k = top_k
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._client = client
        self._call_count = 0
        self._error_count = 0

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[Any] = None) -> "UpstreamClient":
        api_key = settings.llm_api_key.get_secret_value() if settings.llm_api_key else None
        return cls(
            model=settings.llm_model,
            api_key=api_key,
            base_url=settings.llm_base_url,
            temperature=settings.temperature,
            top_p=settings.top_p,
            top_k=settings.top_k,
            max_output_tokens=settings.max_output_tokens,
            timeout=settings.timeout,
            client=client,
        )

    @property
    def configured(self) -> bool:
        return not is_placeholder_key(self.api_key)

    def _get_client(self):
        if self._client is not None:
            return self._client
        if not self.configured:
            raise ConfigurationMissing("Upstream API key is not configured")
        # Retries are the orchestrator's policy, not the SDK's
        self._client = OpenAI(
            api_key=self.api_key.strip(),
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )
        return self._client

    def generate(self, prompt: str) -> str:
        """
        Run one completion round trip.

        Args:
            prompt: Composed prompt

        Returns:
            Raw response text (possibly empty)

        Raises:
            ConfigurationMissing: If no usable credential is set
            UpstreamUnavailable: If the request fails
        """
        if not self.configured:
            raise ConfigurationMissing("Upstream API key is not configured")

        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                top_p=self.top_p,
                max_tokens=self.max_output_tokens,
                extra_body={"top_k": self.top_k},
                timeout=self.timeout
            )
        except APIError as e:
            self._error_count += 1
            logger.error(f"Upstream API error: {e}")
            raise UpstreamUnavailable(f"Upstream API error: {e}") from e
        except Exception as e:
            self._error_count += 1
            logger.error(f"Unexpected error calling upstream: {e}")
            raise UpstreamUnavailable(f"Upstream call failed: {e}") from e

        self._call_count += 1

        usage = getattr(response, "usage", None)
        if usage:
            logger.info(
                f"Upstream tokens: prompt={getattr(usage, 'prompt_tokens', '?')} "
                f"completion={getattr(usage, 'completion_tokens', '?')}"
            )

        if not getattr(response, "choices", None):
            logger.warning("Upstream returned no choices")
            return ""

        text = response.choices[0].message.content or ""
        logger.debug(f"Raw upstream response ({len(text)} chars): {text[:100]!r}")
        return text

    def get_stats(self) -> dict:
        """Return call statistics."""
        return {
            'total_calls': self._call_count,
            'total_errors': self._error_count,
            'error_rate': self._error_count / max(self._call_count + self._error_count, 1)
        }
