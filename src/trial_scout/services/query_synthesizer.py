"""
Query synthesizer: free-text question → structured API query.

Strategy: stream a forced tool call → parse the growing argument JSON after
every increment → yield a draft for live preview → the last draft is the query.
"""

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from pydantic_core import from_json

from trial_scout.models.model_search import QueryDraft
from trial_scout.services.llm import StreamChunk, stream_tool_call
from trial_scout.services.tool_schemas import get_tool

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Find studies that will have the most relevant answers to the user question.\n"
    "In query.*, don't use phrases as-is. Always identify the most relevant keywords, "
    "combining them with AND.\n"
    'E.g. "violation by the FDA" becomes "violation AND FDA".\n'
    'E.g. "improper adherence to safety and scientific integrity" becomes '
    '"adherence AND safety AND integrity"'
)

DRUG_LABELING_SYSTEM_PROMPT = (
    "Find FDA drug labels that will have the most relevant answers to the user question.\n"
    "Write openFDA search expressions on fields such as openfda.brand_name, "
    "openfda.generic_name, openfda.manufacturer_name, indications_and_usage and warnings.\n"
    "Don't use phrases as-is. Always identify the most relevant keywords, "
    "combining them with AND.\n"
    'E.g. "kids with asthma" becomes indications_and_usage:"asthma AND pediatric".'
)

_SYSTEM_PROMPTS: dict[str, str] = {
    "studies": SYSTEM_PROMPT,
    "drugLabeling": DRUG_LABELING_SYSTEM_PROMPT,
}


class LLMStreamError(RuntimeError):
    """The LLM stream reported an error."""


class PartialJSONParser:
    """Incremental parser for a JSON object that is still being streamed.

    Holds the accumulated raw text and the last object that parsed. Truncated
    input never raises: an unparseable prefix keeps the previous value.
    """

    def __init__(self) -> None:
        self.raw: str = ""
        self.value: dict[str, Any] = {}

    def feed(self, chunk: str) -> dict[str, Any]:
        return self.replace(self.raw + chunk)

    def replace(self, text: str) -> dict[str, Any]:
        self.raw = text
        if not text.strip():
            return self.value
        try:
            parsed = from_json(text, allow_partial=True)
        except ValueError:
            logger.debug("Unparseable tool-call prefix (%d chars)", len(text))
            return self.value
        if isinstance(parsed, dict):
            self.value = parsed
        return self.value


async def synthesize_query(
    question: str,
    tool_name: str = "studies",
    llm: Callable[..., AsyncIterator[StreamChunk]] = stream_tool_call,
) -> AsyncIterator[QueryDraft]:
    """Yield a QueryDraft per argument increment; the final one has done=True.

    Raises LLMStreamError if the stream reports an error.
    """
    tool = get_tool(tool_name)
    parser = PartialJSONParser()
    messages = [{"role": "user", "content": question}]

    async for chunk in llm(_SYSTEM_PROMPTS.get(tool_name, SYSTEM_PROMPT), messages, tool):
        if chunk.error:
            raise LLMStreamError(chunk.error)
        if chunk.args is not None:
            parser.replace(chunk.args)
            yield QueryDraft(params=parser.value, raw=parser.raw)

    logger.info("Synthesized %s query: %s", tool_name, parser.value)
    yield QueryDraft(params=parser.value, raw=parser.raw, done=True)
