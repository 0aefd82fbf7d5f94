# resume_optimizer/ai/client.py
import re
import json
import logging
from typing import Any, Optional

import requests
from tenacity import (
    Retrying,
    RetryError,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)

from resume_optimizer.config import LLMConfig
from resume_optimizer.errors import ExternalServiceError

logger = logging.getLogger(__name__)

JSON_FENCE = re.compile(r'```(?:json)?\s*(.*?)```', re.DOTALL)


class GenerativeClient:
    """
    Client for a chat-style generative text API (Ollama compatible).

    Every call is blocking with a bounded retry policy. Failures never
    return None: once retries are exhausted an ExternalServiceError is
    raised so callers can fall back to deterministic behaviour.
    """

    def __init__(self, config: Optional[LLMConfig] = None, session: Optional[requests.Session] = None):
        """
        Initialize client

        Args:
            config: Endpoint, model, timeout and retry settings
            session: Optional requests session (a new one is created if None)
        """
        self.config = config or LLMConfig()
        self.base_url = self.config.base_url.rstrip('/')
        self.session = session or requests.Session()

    def is_available(self) -> bool:
        """Check if the provider is reachable"""
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=5)
            return response.status_code == 200
        except requests.RequestException as e:
            logger.warning(f"Generative provider not available: {e}")
            return False

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=self.config.backoff_min,
                max=self.config.backoff_max
            ),
            retry=retry_if_exception_type((requests.RequestException, ConnectionError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=False
        )

    def _post_chat(self, payload: dict) -> dict:
        response = self.session.post(
            f"{self.base_url}/api/chat",
            json=payload,
            timeout=self.config.timeout
        )
        response.raise_for_status()
        return response.json()

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: int = 500
    ) -> str:
        """
        Generate text

        Args:
            prompt: User prompt
            system_prompt: System instruction
            temperature: Sampling temperature (config default if None)
            max_tokens: Max response length

        Returns:
            Generated text

        Raises:
            ExternalServiceError: provider failed after all retries or
                returned an empty or malformed message
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.config.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.config.temperature if temperature is None else temperature,
                "num_predict": max_tokens
            }
        }

        try:
            result = self._retrying()(self._post_chat, payload)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(f"Generation failed after {self.config.max_attempts} attempts: {cause}")
            raise ExternalServiceError(f"Generative provider failed: {cause}", cause=cause) from cause
        except ValueError as e:
            # Response body was not JSON
            logger.error(f"Generative provider returned invalid JSON: {e}")
            raise ExternalServiceError("Generative provider returned an invalid response", cause=e) from e

        # Only {"message": {"content": str}} is usable
        message = result.get("message") if isinstance(result, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            logger.error(f"Generative provider returned an unexpected body: {type(result).__name__}")
            raise ExternalServiceError("Generative provider returned an unexpected response")

        content = content.strip()
        if not content:
            raise ExternalServiceError("Generative provider returned an empty response")
        return content

    def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: int = 800
    ) -> Any:
        """
        Generate and parse a JSON array or object

        Raises:
            ExternalServiceError: provider failed or output is not JSON
        """
        text = self.generate(prompt, system_prompt=system_prompt,
                             temperature=temperature, max_tokens=max_tokens)
        return parse_json_response(text)

    def close(self):
        """Cleanup resources"""
        self.session.close()


def parse_json_response(text: str) -> Any:
    """
    Extract the JSON payload from model output.

    Accepts bare JSON, JSON inside a markdown fence, or JSON surrounded
    by prose (first array/object wins).
    """
    fenced = JSON_FENCE.search(text)
    if fenced:
        text = fenced.group(1)
    text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    starts = [i for i in (text.find('['), text.find('{')) if i >= 0]
    if starts:
        start = min(starts)
        closer = ']' if text[start] == '[' else '}'
        end = text.rfind(closer)
        if end > start:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError as e:
                raise ExternalServiceError(f"Could not parse JSON from response: {e}", cause=e) from e

    raise ExternalServiceError("Response did not contain JSON")
