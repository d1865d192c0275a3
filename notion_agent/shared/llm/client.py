"""
OpenAI client with retry logic.

Provides a cached client instance and wrappers for chat completions
(free text and structured JSON) with automatic retries using tenacity.
"""

import os
from typing import Any, Dict, List, Optional, Tuple

from openai import OpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from dotenv import load_dotenv
load_dotenv()

DEFAULT_MODEL = "gpt-4.1-mini"

# Module-level cache for OpenAI client
_client: Optional[OpenAI] = None


def get_cached_client() -> OpenAI:
    """
    Returns a cached instance of the OpenAI client.

    Uses OPENAI_API_KEY environment variable for authentication.
    The client is created once and reused for all subsequent calls.
    """
    global _client
    if _client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = OpenAI(api_key=api_key)
    return _client


def _usage(response) -> Dict[str, int]:
    if response.usage is None:
        return {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
    return {
        "input_tokens": response.usage.prompt_tokens,
        "output_tokens": response.usage.completion_tokens,
        "total_tokens": response.usage.total_tokens,
    }


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((Exception,)),
    reraise=True,
)
def call_llm_with_usage(
    messages: List[Dict[str, str]],
    model: str = DEFAULT_MODEL,
    client: Optional[OpenAI] = None,
) -> Tuple[str, Dict[str, int]]:
    """
    Call the OpenAI Chat Completion API and return content with token usage.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        model: Model identifier to use
        client: Optional OpenAI client instance. If not provided, uses cached client.

    Returns:
        Tuple of (response content, usage dict with input/output/total tokens)
    """
    if client is None:
        client = get_cached_client()

    response = client.chat.completions.create(
        model=model,
        messages=messages,
    )

    content = (response.choices[0].message.content or "").strip()
    return content, _usage(response)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((Exception,)),
    reraise=True,
)
def call_llm_json_with_usage(
    messages: List[Dict[str, str]],
    schema: Optional[Dict[str, Any]] = None,
    schema_name: str = "response",
    strict: bool = False,
    model: str = DEFAULT_MODEL,
    client: Optional[OpenAI] = None,
) -> Tuple[str, Dict[str, int]]:
    """
    Call the OpenAI Chat Completion API in JSON mode.

    With a schema the call uses structured outputs (json_schema); without
    one it falls back to plain JSON-object mode.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        schema: Optional JSON schema the response must follow
        schema_name: Name reported to the API for the schema
        strict: Whether the API should enforce the schema strictly
        model: Model identifier to use
        client: Optional OpenAI client instance. If not provided, uses cached client.

    Returns:
        Tuple of (raw JSON text, usage dict with input/output/total tokens)
    """
    if client is None:
        client = get_cached_client()

    if schema is not None:
        response_format = {
            "type": "json_schema",
            "json_schema": {"name": schema_name, "schema": schema, "strict": strict},
        }
    else:
        response_format = {"type": "json_object"}

    response = client.chat.completions.create(
        model=model,
        messages=messages,
        response_format=response_format,
    )

    content = (response.choices[0].message.content or "").strip()
    return content, _usage(response)
