import logging
import time
from typing import Optional

from openai import (
    APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI,
    AuthenticationError, NotFoundError, OpenAIError, PermissionDeniedError, RateLimitError
)

from ..config import REQUEST_TIMEOUT, TARGET_LANGUAGE, TRANSLATE_MODEL, get_openai_client
from ..errors import ConfigurationError, TranslationError

logger = logging.getLogger(__name__)


class Translator:
    """Translates page text through an OpenAI-compatible chat completions endpoint.

    One request per call and no retrying here: the RetryScheduler decides
    whether a failure gets another attempt.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None,
                 model: str = TRANSLATE_MODEL,
                 target_language: str = TARGET_LANGUAGE,
                 system_prompt: Optional[str] = None,
                 timeout: float = REQUEST_TIMEOUT):
        self.client = client or get_openai_client()
        self.model = model
        self.target_language = target_language
        self.timeout = timeout
        self.system_prompt = system_prompt or self._build_default_system_prompt(target_language)

    @staticmethod
    def _build_default_system_prompt(target_language: str) -> str:
        return (f"You are a professional translator. Translate the following text into {target_language}. "
                "Maintain the original formatting and tone.")

    async def translate(self, text: str) -> str:
        """Translates one page of text.

        Raises:
            TranslationError: Transient or per-request failure (rate limit,
                timeout, connection, server error, empty response).
            ConfigurationError: The service rejected the credentials or the
                model name; retrying cannot help.
        """
        start_api_call = time.time()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": text}
                ],
                stream=False,
                timeout=self.timeout,
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            raise ConfigurationError(f"Translation service rejected the API key: {self._describe(e)}") from e
        except NotFoundError as e:
            raise ConfigurationError(f"Model '{self.model}' not found. Check TRANSLATE_MODEL. Details: {self._describe(e)}") from e
        except RateLimitError as e:
            raise TranslationError(f"Rate limit exceeded: {self._describe(e)}", status_code=e.status_code) from e
        except APITimeoutError as e:
            raise TranslationError(f"Request timed out after {self.timeout:.0f}s.") from e
        except APIConnectionError as e:
            raise TranslationError(f"Could not reach the translation service: {self._describe(e)}") from e
        except APIStatusError as e:
            raise TranslationError(f"Translation service error (status {e.status_code}): {self._describe(e)}",
                                   status_code=e.status_code) from e
        except OpenAIError as e:
            raise TranslationError(f"Translation failed: {e}") from e

        api_duration = time.time() - start_api_call
        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise TranslationError("Translation service returned an empty response.")

        logger.debug("Translated %d characters in %.2fs.", len(text), api_duration)
        return content.strip()

    @staticmethod
    def _describe(error: OpenAIError) -> str:
        """Prefers the service's own error message over the SDK's wrapper text."""
        body = getattr(error, "body", None)
        if isinstance(body, dict):
            inner = body.get("error")
            message = body.get("message") or (inner.get("message") if isinstance(inner, dict) else inner)
            if message:
                return str(message)
        return getattr(error, "message", None) or str(error)
