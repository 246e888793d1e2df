"""
AI Manager Service for the text-generation provider (Google Gemini).
"""
import asyncio
from typing import Optional

from google import genai
from google.genai import types
import structlog

from core.config import settings
from core.exceptions import AIServiceException

logger = structlog.get_logger("ai_manager")


class AIRetryConfig:
    """Configuration for AI service retry logic."""

    def __init__(
        self,
        max_retries: int = 1,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        backoff_multiplier: float = 2.0,
        timeout_seconds: float = 30.0,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_multiplier = backoff_multiplier
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> "AIRetryConfig":
        return cls(
            max_retries=settings.ai_max_retries,
            timeout_seconds=settings.ai_request_timeout_seconds,
        )


class AIManager:
    """
    Wrapper around the Gemini async client.

    The client is created lazily from the server-wide API key. Every call is
    bounded by a timeout and retried with exponential backoff; failures
    surface as AIServiceException.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        retry_config: Optional[AIRetryConfig] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.retry_config = retry_config or AIRetryConfig.from_settings()
        self._gemini_client = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def initialize_gemini_client(self) -> None:
        if not self.is_configured:
            raise AIServiceException(detail="Gemini API key is not configured", provider="Google")

        self._gemini_client = genai.Client(api_key=self.api_key)
        logger.info("Gemini client initialized", model=self.model)

    async def _retry_with_backoff(self, func, *args, **kwargs):
        """
        Execute a coroutine function with timeout and exponential backoff.
        """
        last_exception = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                return await asyncio.wait_for(
                    func(*args, **kwargs), timeout=self.retry_config.timeout_seconds
                )

            except asyncio.TimeoutError as e:
                last_exception = e
                logger.warning(
                    "AI request timeout",
                    attempt=attempt + 1,
                    timeout=self.retry_config.timeout_seconds,
                )

            except Exception as e:
                last_exception = e
                logger.warning("AI request failed", attempt=attempt + 1, error=str(e))

            # Don't retry on the last attempt
            if attempt < self.retry_config.max_retries:
                delay = min(
                    self.retry_config.base_delay
                    * (self.retry_config.backoff_multiplier**attempt),
                    self.retry_config.max_delay,
                )
                logger.info("Retrying AI request", delay_seconds=delay, attempt=attempt + 1)
                await asyncio.sleep(delay)

        logger.error("All AI request retries exhausted", error=str(last_exception))
        if isinstance(last_exception, asyncio.TimeoutError):
            raise AIServiceException(
                detail=f"AI request timeout after {self.retry_config.timeout_seconds} seconds",
                provider="Google",
            )
        raise AIServiceException(
            detail=f"AI request failed after {self.retry_config.max_retries} retries: {last_exception}",
            provider="Google",
        )

    async def generate_text(self, prompt: str) -> str:
        """Generate a plain-text answer for `prompt`."""
        if self._gemini_client is None:
            try:
                self.initialize_gemini_client()
            except AIServiceException:
                raise
            except Exception as e:
                logger.error("Gemini client initialization failed", error=str(e))
                raise AIServiceException(
                    detail=f"Failed to initialize Gemini client: {e}", provider="Google"
                )

        async def _generate():
            response = await self._gemini_client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    max_output_tokens=settings.gemini_max_tokens,
                    temperature=settings.gemini_temperature,
                ),
            )
            if not response.text:
                raise ValueError("Empty response from Gemini")
            return response.text

        logger.info("Starting Gemini content generation", model=self.model, prompt_chars=len(prompt))
        return await self._retry_with_backoff(_generate)


# Shared instance used by the chatbot routes
ai_manager = AIManager()
