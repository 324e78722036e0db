"""
Answer summarizer: question + fetched records → cited Markdown answer.

The first records are serialized as JSON and cut at a per-kind character
budget. The cut is a plain slice, so the last record's JSON may be
truncated mid-document.
"""

import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from trial_scout.constants import (
    CLINICAL_TRIALS_STUDY_URL,
    DAILYMED_SETID_URL,
    STUDIES,
    SUMMARY_CHAR_BUDGET,
    SUMMARY_RECORD_COUNT,
)
from trial_scout.models.model_search import SearchResult
from trial_scout.services.llm import StreamChunk, stream_text
from trial_scout.services.query_synthesizer import LLMStreamError
from trial_scout.services.rendering import open_links_in_new_tab, render_markdown

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Answer the user question using ONLY the data supplied in this conversation."
)

ANSWER_PROMPT = """
Answer the user question ONLY using these {noun}, in one or two paragraphs.
Highlight key words in **bold** so that just reading the bold words gives you the answer.
Cite the relevant {id_name}s inline like this: [{id_example}]({url_prefix}{id_example}).

Then list 1-line summaries of the {noun} with the most relevant snippet supporting the answer, like this:

- [{id_example}]({url_prefix}{id_example}): [1-line summary]
""".strip()

_PROMPT_VARS: dict[str, dict[str, str]] = {
    "studies": {
        "noun": "studies",
        "id_name": "NCT ID",
        "id_example": "NCTnnnn",
        "url_prefix": f"{CLINICAL_TRIALS_STUDY_URL}/",
    },
    "drugLabeling": {
        "noun": "drug labels",
        "id_name": "set ID",
        "id_example": "SETID",
        "url_prefix": DAILYMED_SETID_URL,
    },
}


def serialize_records(result: SearchResult) -> str:
    """First SUMMARY_RECORD_COUNT records as indented JSON, cut at the kind's budget."""
    budget = SUMMARY_CHAR_BUDGET.get(result.kind, SUMMARY_CHAR_BUDGET[STUDIES])
    payload = json.dumps(list(result.records[:SUMMARY_RECORD_COUNT]), indent=2)
    return payload[:budget]


def build_messages(result: SearchResult) -> list[dict[str, Any]]:
    return [
        {"role": "user", "content": result.question},
        {"role": "assistant", "content": serialize_records(result)},
        {
            "role": "user",
            "content": ANSWER_PROMPT.format(**_PROMPT_VARS[result.kind]),
        },
    ]


async def summarize(
    result: SearchResult,
    llm: Callable[..., AsyncIterator[StreamChunk]] = stream_text,
) -> AsyncIterator[str]:
    """Yield the rendered summary HTML as it grows.

    The final yield is the completed summary with every link opening in a
    new tab. Raises LLMStreamError if the stream reports an error.
    """
    content = ""
    async for chunk in llm(SYSTEM_PROMPT, build_messages(result)):
        if chunk.error:
            raise LLMStreamError(chunk.error)
        if chunk.content:
            content = chunk.content
            yield render_markdown(content)

    logger.info("Summary complete (%d chars)", len(content))
    yield open_links_in_new_tab(render_markdown(content))
