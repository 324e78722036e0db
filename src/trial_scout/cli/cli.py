"""Command-line interface for trial-scout."""

import asyncio
import json
import logging
from pathlib import Path

import click
from bs4 import BeautifulSoup

from trial_scout.config import get_settings
from trial_scout.constants import DEFAULT_SIMILARITY_THRESHOLD, STUDIES
from trial_scout.models.model_clinical_trials import StudyCard
from trial_scout.models.model_fda import DrugLabelCard
from trial_scout.services.pipeline import SearchPipeline


@click.group()
@click.version_option(package_name="trial-scout")
def main():
    """trial-scout: ask ClinicalTrials.gov and openFDA questions in plain English."""
    logging.basicConfig(level=get_settings().log_level)


def _record_line(kind: str, record: dict) -> str:
    if kind == STUDIES:
        card = StudyCard.from_record(record)
        return f"{card.nct_id} [{card.overall_status}] {card.title}"
    label = DrugLabelCard.from_record(record)
    return f"{label.label_id} [{label.product_type}] {label.title}"


async def _run_search(question: str, source: str, threshold: float) -> SearchPipeline:
    pipeline = SearchPipeline()
    summary_html = ""
    async with pipeline:
        async for event in pipeline.run(question, source, threshold):
            if event.stage == "error":
                click.echo(f"Error: {event.data['message']}", err=True)
            elif event.stage == "results":
                result = pipeline.current
                click.echo(f"\nQuery: {json.dumps(result.params)}")
                click.echo(f"Found {len(result)} records:")
                for record in result.records:
                    click.echo(f"  {_record_line(source, record)}")
            elif event.stage == "graph":
                if event.data is None:
                    reason = BeautifulSoup(event.html, "html.parser").get_text()
                    click.echo(f"\nSimilarity graph unavailable: {reason}")
                else:
                    click.echo(
                        f"\nSimilarity graph: {len(event.data['nodes'])} nodes, "
                        f"{len(event.data['links'])} links at threshold {threshold:.2f}"
                    )
            elif event.stage == "summary":
                summary_html = event.html
    if summary_html:
        click.echo("\n" + BeautifulSoup(summary_html, "html.parser").get_text())
    return pipeline


@main.command()
@click.argument("question")
@click.option(
    "-s",
    "--source",
    type=click.Choice(["studies", "drugLabeling"]),
    default="studies",
    show_default=True,
    help="Which API to query",
)
@click.option(
    "-t",
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=DEFAULT_SIMILARITY_THRESHOLD,
    show_default=True,
    help="Minimum similarity for a graph edge",
)
@click.option("-o", "--output", type=click.Path(), help="Output file path (JSON)")
def search(question: str, source: str, threshold: float, output: str | None):
    """Answer QUESTION from ClinicalTrials.gov studies or FDA drug labels."""
    click.echo(f"Searching {source} for: {question}")
    pipeline = asyncio.run(_run_search(question, source, threshold))

    if output and pipeline.current is not None:
        Path(output).write_text(pipeline.current.model_dump_json(indent=2))
        click.echo(f"\nResults saved to: {output}")


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int):
    """Run the web service."""
    import uvicorn

    uvicorn.run("trial_scout.api.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
