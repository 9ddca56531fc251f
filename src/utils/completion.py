"""Text completion through Llama Stack."""

import asyncio
import logging
from typing import Optional

from llama_stack_client import (
    APIConnectionError,
    APIStatusError,
    AsyncLlamaStackClient,  # type: ignore
)
from llama_stack_client.lib.agents.event_logger import interleaved_content_as_str

import constants
import metrics
from models.config import InferenceConfiguration

logger = logging.getLogger(__name__)


class CompletionError(Exception):
    """Completion capability is unavailable or failed."""


async def select_model_id(
    client: AsyncLlamaStackClient, inference: InferenceConfiguration
) -> str:
    """
    Select the Llama Stack model identifier to use for completions.

    The configured default model and provider take precedence. Otherwise the
    first LLM model registered in Llama Stack is used.

    Raises:
        CompletionError: When no LLM model is available.
    """
    if inference.default_model and inference.default_provider:
        return f"{inference.default_provider}/{inference.default_model}"

    logger.info("No default model configured, selecting first available LLM")
    try:
        models = await client.models.list()
    except (APIConnectionError, APIStatusError) as e:
        raise CompletionError(f"Unable to list models: {e}") from e

    model = next(
        (
            m
            for m in models
            if m.model_type == "llm"  # pyright: ignore[reportAttributeAccessIssue]
        ),
        None,
    )
    if model is None:
        raise CompletionError("No LLM model found in available models")
    return model.identifier


async def complete(  # pylint: disable=too-many-arguments
    client: AsyncLlamaStackClient,
    model_id: str,
    system_prompt: str,
    user_message: str,
    *,
    temperature: float = constants.DEFAULT_TEMPERATURE,
    max_tokens: int = constants.DEFAULT_MAX_TOKENS,
    timeout: Optional[float] = constants.DEFAULT_COMPLETION_TIMEOUT,
    purpose: str = "coach",
) -> str:
    """
    Send one system prompt + user message pair to the model.

    Parameters:
        client: Initialised Llama Stack client.
        model_id: Llama Stack model identifier.
        system_prompt: Text placed into the system message.
        user_message: Text placed into the user message.
        temperature: Sampling temperature.
        max_tokens: Maximal number of generated tokens.
        timeout: Seconds to wait for the response, None waits forever.
        purpose: Label used in metrics ("coach", "summary").

    Returns:
        str: Text content of the completion message.

    Raises:
        CompletionError: On connection problems, error status or timeout.
    """
    metrics.llm_calls_total.labels(purpose, model_id).inc()
    try:
        response = await asyncio.wait_for(
            client.inference.chat_completion(
                model_id=model_id,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                sampling_params={
                    "strategy": {
                        "type": "top_p",
                        "temperature": temperature,
                        "top_p": constants.DEFAULT_TOP_P,
                    },
                    "max_tokens": max_tokens,
                },
                stream=False,
            ),
            timeout=timeout,
        )
    except (APIConnectionError, APIStatusError) as e:
        metrics.llm_calls_failures_total.labels(purpose).inc()
        logger.error("Completion request failed: %s", e)
        raise CompletionError(str(e)) from e
    except asyncio.TimeoutError as e:
        metrics.llm_calls_failures_total.labels(purpose).inc()
        logger.error("Completion request timed out after %s seconds", timeout)
        raise CompletionError(f"Completion timed out after {timeout} seconds") from e

    content = getattr(getattr(response, "completion_message", None), "content", None)
    if content is None:
        logger.warning("Completion response lacks completion_message.content")
        return ""
    return interleaved_content_as_str(content)
