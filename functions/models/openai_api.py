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

import logging
import time
from typing import Optional

from openai import OpenAI

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_MODEL = "gpt-3.5-turbo-instruct"
DEFAULT_CHAT_MODEL = "gpt-4"


class CompletionInvalidResponseException(Exception):
    pass


def _truncate(text: str, limit: int = 200) -> str:
    return (text[:limit] + "...") if len(text) > limit else text


def call_completion(
    client: OpenAI,
    prompt: str,
    model: str = DEFAULT_COMPLETION_MODEL,
    max_tokens: int = 1000,
    temperature: float = 0.5,
) -> str:
    """
    Calls the text-completion endpoint and returns the first choice's text.

    Args:
        client (OpenAI): The API client.
        prompt (str): The full prompt.
        model (str): The model to call with.
        max_tokens (int): Upper bound on generated tokens.
        temperature (float): Sampling temperature.

    Returns:
        str: The raw text of the first returned choice.
    """
    start_time = time.time()
    logger.info("Calling OpenAI completion, prompt: '%s'", _truncate(prompt.strip()))
    response = client.completions.create(
        model=model,
        prompt=prompt,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    logger.info("OpenAI completion call took: %.2fs", time.time() - start_time)
    if not response.choices:
        raise CompletionInvalidResponseException()
    return response.choices[0].text


def call_chat(
    client: OpenAI,
    system_prompt: str,
    user_prompt: str,
    model: str = DEFAULT_CHAT_MODEL,
    max_tokens: int = 500,
    temperature: float = 0.7,
) -> Optional[str]:
    """Calls the chat endpoint with one system and one user message."""
    start_time = time.time()
    logger.info("Calling OpenAI chat, prompt: '%s'", _truncate(user_prompt))
    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        max_tokens=max_tokens,
        temperature=temperature,
    )
    logger.info("OpenAI chat call took: %.2fs", time.time() - start_time)
    if not response.choices:
        raise CompletionInvalidResponseException()
    return response.choices[0].message.content
