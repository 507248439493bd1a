from __future__ import annotations

import logging
from typing import List, Optional

import typer
from dotenv import load_dotenv

from .config import HarvestConfig
from .errors import ConfigError
from .runner import EXIT_ERROR, SessionRunner

app = typer.Typer(add_completion=False, help="Collect gallery image URLs from a feed and download them.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _parse_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _build_config(terms: str, headless: Optional[bool], max_stall: Optional[int]) -> HarvestConfig:
    load_dotenv()
    try:
        return HarvestConfig.from_env(
            search_terms=_parse_csv(terms) or None,
            headless=headless,
            max_stall_count=max_stall,
        )
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=EXIT_ERROR)


def _execute(config: HarvestConfig, collect: bool, download: bool) -> None:
    if collect:
        try:
            config.require_collection_settings()
        except ConfigError as exc:
            typer.echo(f"Configuration error: {exc}", err=True)
            raise typer.Exit(code=EXIT_ERROR)
    code = SessionRunner(config).run(collect=collect, download=download)
    raise typer.Exit(code=code)


TermsOption = typer.Option("", "--terms", help="Search terms, comma separated. Defaults to the built-in list.")
HeadlessOption = typer.Option(None, "--headless/--no-headless", help="Run the browser without a window.")
MaxStallOption = typer.Option(None, "--max-stall", min=1, help="Consecutive no-growth cycles before a term stops.")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Debug logging.")


@app.command()
def run(
    terms: str = TermsOption,
    headless: Optional[bool] = HeadlessOption,
    max_stall: Optional[int] = MaxStallOption,
    verbose: bool = VerboseOption,
) -> None:
    """Collect URLs for every term, then download them."""
    _configure_logging(verbose)
    _execute(_build_config(terms, headless, max_stall), collect=True, download=True)


@app.command()
def collect(
    terms: str = TermsOption,
    headless: Optional[bool] = HeadlessOption,
    max_stall: Optional[int] = MaxStallOption,
    verbose: bool = VerboseOption,
) -> None:
    """Collect URLs and write checkpoints without downloading."""
    _configure_logging(verbose)
    _execute(_build_config(terms, headless, max_stall), collect=True, download=False)


@app.command()
def download(
    terms: str = TermsOption,
    verbose: bool = VerboseOption,
) -> None:
    """Download from existing checkpoints. No browser is started."""
    _configure_logging(verbose)
    _execute(_build_config(terms, None, None), collect=False, download=True)


if __name__ == "__main__":
    app()
