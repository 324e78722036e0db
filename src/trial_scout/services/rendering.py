"""HTML fragment rendering for the search page's render targets.

Pure view models (StudyCard, DrugLabelCard) are shaped elsewhere; this module
only turns them into markup. Every value is HTML-escaped except Markdown
sections from the remote APIs and the LLM summary, which are rendered with
`markdown` and inserted as trusted HTML.
"""

import json
from collections.abc import Iterable, Sequence
from html import escape
from typing import Any

import markdown
from bs4 import BeautifulSoup

from trial_scout.constants import MAX_RENDERED_RECORDS, STUDIES
from trial_scout.models.model_clinical_trials import StudyCard
from trial_scout.models.model_fda import DrugLabelCard
from trial_scout.models.model_search import record_id

_EMPTY_MESSAGES: dict[str, str] = {
    "studies": "No studies found",
    "drugLabeling": "No drug labels found",
}


# ── Small fragments ──────────────────────────────────────────────────────────


def render_alert(message: str, level: str = "danger") -> str:
    return f'<div class="alert alert-{level}">{escape(str(message))}</div>'


def render_spinner(text: str) -> str:
    return (
        '<div class="alert alert-info narrative mx-auto d-flex align-items-center">'
        '<div class="spinner-border text-primary ms-2" role="status">'
        '<span class="visually-hidden">Loading...</span></div>'
        f'<span class="ms-2">{escape(text)}</span></div>'
    )


def render_markdown(text: str | None) -> str:
    return markdown.markdown(text or "")


def open_links_in_new_tab(fragment: str) -> str:
    """Set target=_blank on every anchor in an HTML fragment."""
    soup = BeautifulSoup(fragment, "html.parser")
    for a in soup.find_all("a"):
        a["target"] = "_blank"
    return str(soup)


def render_params_table(params: dict[str, Any]) -> str:
    """Key/value preview of the (possibly partial) query parameters."""
    rows = "".join(
        f"<tr><td>{escape(str(k))}</td><td>{escape(_display_value(v))}</td></tr>"
        for k, v in params.items()
    )
    return (
        '<table class="table"><thead><tr><th>Parameter</th><th>Value</th></tr></thead>'
        f"<tbody>{rows}</tbody></table>"
    )


def _display_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _details(summary: str, body: str) -> str:
    return f'<details class="mb-2"><summary>{summary}</summary>{body}</details>'


# ── Cards ────────────────────────────────────────────────────────────────────


def render_study_card(card: StudyCard, highlighted: bool = False) -> str:
    sections = [
        '<div class="mb-2">'
        f'<div class="text-muted fw-bold small">{escape(card.nct_id)}</div>'
        f'<div class="fw-bold"><a href="{escape(card.url)}" target="_blank">'
        f"{escape(card.title)}</a></div>"
        f'<span class="badge rounded-pill text-bg-warning">{escape(card.study_type)}</span>'
        "</div>",
        '<div class="mb-2">'
        f'<i class="bi bi-circle-fill" style="color: {card.color}"></i> '
        f"{escape(card.overall_status)} "
        f"({escape(card.start_date)} - {escape(card.primary_completion_date)})"
        "</div>",
    ]
    if card.conditions is not None:
        sections.append(_details("Conditions", escape(", ".join(card.conditions))))
    if card.interventions is not None:
        sections.append(
            _details(
                "Interventions",
                escape("\n".join(str(g) for g in card.interventions)),
            )
        )
    if card.eligibility is not None:
        sections.append(_details("Eligibility", render_markdown(card.eligibility)))
    if card.outcomes is not None:
        items = "".join(
            f"<li><strong>{escape(o.measure)}</strong> {escape(o.description)} "
            f"<em>{escape(o.time_frame)}</em></li>"
            for o in card.outcomes
        )
        sections.append(_details("Outcomes", f"<ol>{items}</ol>"))

    css = "list-group-item list-group-item-warning" if highlighted else "list-group-item"
    return f'<div class="{css}">{"".join(sections)}</div>'


def render_label_card(card: DrugLabelCard, highlighted: bool = False) -> str:
    sections = [
        '<div class="mb-2">'
        f'<div class="text-muted fw-bold small">{escape(card.label_id)}</div>'
        f'<div class="fw-bold"><a href="{escape(card.url)}" target="_blank">'
        f"{escape(card.title)}</a></div>"
        f'<span class="badge rounded-pill text-bg-warning">{escape(card.product_type)}</span>'
        "</div>",
        '<div class="mb-2">'
        f'<i class="bi bi-circle-fill" style="color: {card.color}"></i> '
        f"{escape(card.manufacturer)} ({escape(card.route)}, {escape(card.effective_time)})"
        "</div>",
    ]
    for summary, text in (
        ("Indications", card.indications),
        ("Warnings", card.warnings),
        ("Dosage", card.dosage),
    ):
        if text is not None:
            sections.append(_details(summary, render_markdown(text)))

    css = "list-group-item list-group-item-warning" if highlighted else "list-group-item"
    return f'<div class="{css}">{"".join(sections)}</div>'


# ── Result list ──────────────────────────────────────────────────────────────


def render_results(
    kind: str,
    records: Sequence[dict[str, Any]],
    highlighted: Iterable[str] = (),
    subset: Iterable[str] | None = None,
) -> str:
    """Render up to MAX_RENDERED_RECORDS records as a list group.

    `subset` limits rendering to records with those identifiers (graph
    brushing); an empty or unmatched subset falls back to all records.
    """
    shown = list(records)
    if subset:
        wanted = set(subset)
        scoped = [r for r in shown if record_id(kind, r) in wanted]
        shown = scoped or shown

    if not shown:
        return render_alert(_EMPTY_MESSAGES.get(kind, "No results found"), "warning")

    marked = set(highlighted)
    if kind == STUDIES:
        cards = [StudyCard.from_record(r) for r in shown[:MAX_RENDERED_RECORDS]]
        items = [render_study_card(c, c.nct_id in marked) for c in cards]
    else:
        cards = [DrugLabelCard.from_record(r) for r in shown[:MAX_RENDERED_RECORDS]]
        items = [render_label_card(c, c.label_id in marked) for c in cards]

    return f'<div class="list-group">{"".join(items)}</div>'
