"""Gemini API client."""
from google import genai
from google.genai import errors, types

from finn.utils.exceptions import LLMError, RetryableLLMError, RetryableNetworkError
from finn.utils.logger import get_logger
from finn.utils.retry import retry_with_backoff

logger = get_logger()

DEFAULT_MODEL = "gemini-2.5-flash-lite"


class GeminiClient:
    """Sends prompts to Gemini and returns the completion text."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL,
                 max_retries: int = 3, backoff_factor: float = 2.0):
        """
        Initialize client.

        Args:
            api_key: Google AI API key
            model_name: Gemini model identifier
            max_retries: Attempts per prompt for transient failures
            backoff_factor: Exponential backoff base in seconds
        """
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name
        self.generate = retry_with_backoff(
            max_retries=max_retries,
            backoff_factor=backoff_factor
        )(self._generate)

        logger.info(f"Gemini client initialized with {self.model_name}")

    def _generate(self, prompt: str, json_mode: bool = True) -> str:
        """
        Generate a completion.

        Args:
            prompt: Prompt text
            json_mode: Ask the model for an ``application/json`` response

        Returns:
            Completion text

        Raises:
            RetryableLLMError: On rate limiting and server-side failures
            RetryableNetworkError: When the request does not reach the API
            LLMError: On other API errors or an empty response
        """
        config = types.GenerateContentConfig(response_mime_type="application/json") if json_mode else None

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=config
            )
        except errors.ServerError as e:
            raise RetryableLLMError(f"Gemini server error: {e}")
        except errors.APIError as e:
            if e.code == 429:
                raise RetryableLLMError(f"Gemini rate limit: {e}")
            raise LLMError(f"Gemini API error: {e}")
        except Exception as e:
            raise RetryableNetworkError(f"Gemini request failed: {e}")

        if not response.text:
            raise LLMError("Gemini returned an empty response")

        logger.debug(f"Gemini response ({len(response.text)} chars)")
        return response.text
