# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import time
import logging
import threading
from typing import Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT_SECONDS = 60.0


class GeminiRequestException(Exception):
    """The request to Gemini failed (HTTP error or transport failure)."""


class GeminiTimeoutException(GeminiRequestException):
    """The request to Gemini did not complete within the configured timeout."""


class TextGenerator(Protocol):
    """What the enhancement service needs from a text-generation API."""

    def generate(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        max_output_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> str:
        ...


def _truncate(text: str, limit: int = 200) -> str:
    return (text[:limit] + "...") if len(text) > limit else text


class GeminiClient:
    """Thin wrapper around ``google.genai`` with explicit timeouts."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client: Optional[genai.Client] = None
        self._lock = threading.Lock()

    def _get_client(self) -> genai.Client:
        with self._lock:
            if self._client is None:
                if not self.api_key:
                    raise GeminiRequestException("GEMINI_API_KEY is not configured")
                self._client = genai.Client(
                    api_key=self.api_key,
                    http_options=types.HttpOptions(
                        timeout=int(self.timeout_seconds * 1000)
                    ),
                )
            return self._client

    def generate(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        max_output_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> str:
        """
        Calls Gemini with a single prompt.

        Args:
            prompt (str): The user prompt.
            system_instruction (str): Optional system instruction.
            temperature (float): Sampling temperature.
            max_output_tokens (int): Optional output token ceiling.
            json_output (bool): Ask for an ``application/json`` response.

        Returns:
            str: The response text, or an empty string if Gemini returned none.

        Raises:
            GeminiTimeoutException: If the call exceeded the timeout.
            GeminiRequestException: If the call failed for any other reason.
        """
        client = self._get_client()
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json" if json_output else None,
        )
        start_time = time.time()
        logger.info("Calling Gemini (%s), prompt: '%s'", self.model, _truncate(prompt))
        try:
            response = client.models.generate_content(
                model=self.model, contents=prompt, config=config
            )
        except httpx.TimeoutException as e:
            raise GeminiTimeoutException(
                f"Gemini call timed out after {self.timeout_seconds}s"
            ) from e
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise GeminiRequestException(str(e)) from e
        logger.info("Gemini call took: %.2fs", time.time() - start_time)
        return response.text or ""
