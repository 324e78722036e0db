"""Streaming LLM call helpers.

Both helpers yield StreamChunk objects whose `content` / `args` are the
cumulative text so far, mirroring the {content}|{args}|{error} fragments a
browser streaming client sees. API failures are yielded as `error` chunks
rather than raised, so callers decide how to surface them.
"""

import logging
from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Any

import anthropic
from anthropic import NOT_GIVEN, AsyncAnthropic
from dotenv import load_dotenv
from pydantic import BaseModel

from trial_scout.config import get_settings
from trial_scout.services.tool_schemas import to_anthropic_tool

load_dotenv()

logger = logging.getLogger(__name__)


class StreamChunk(BaseModel):
    content: str | None = None
    args: str | None = None
    error: str | None = None


@lru_cache
def get_client() -> AsyncAnthropic:
    settings = get_settings()
    return AsyncAnthropic(
        api_key=settings.anthropic_api_key or None,
        base_url=settings.llm_base_url,
    )


async def _stream(**kwargs: Any) -> AsyncIterator[StreamChunk]:
    settings = get_settings()
    content = ""
    args = ""
    try:
        stream = await get_client().messages.create(
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            stream=True,
            **kwargs,
        )
        async for event in stream:
            if event.type != "content_block_delta":
                continue
            delta = event.delta
            if delta.type == "text_delta":
                content += delta.text
                yield StreamChunk(content=content)
            elif delta.type == "input_json_delta":
                args += delta.partial_json
                yield StreamChunk(args=args)
    except anthropic.APIError as e:
        logger.warning("LLM stream failed: %s", e)
        yield StreamChunk(error=str(e))


async def stream_tool_call(
    system: str, messages: list[dict[str, Any]], tool: dict[str, Any]
) -> AsyncIterator[StreamChunk]:
    """Stream a completion that is forced to call `tool`; yields growing `args`."""
    async for chunk in _stream(
        system=system or NOT_GIVEN,
        messages=messages,
        tools=[to_anthropic_tool(tool)],
        tool_choice={"type": "tool", "name": tool["name"]},
    ):
        yield chunk


async def stream_text(
    system: str, messages: list[dict[str, Any]]
) -> AsyncIterator[StreamChunk]:
    """Stream a plain text completion; yields growing `content`."""
    async for chunk in _stream(system=system or NOT_GIVEN, messages=messages):
        yield chunk
