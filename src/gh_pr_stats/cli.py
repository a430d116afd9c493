"""CLI entry point for gh-pr-stats."""

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from gh_pr_stats import __version__
from gh_pr_stats.collect.orchestrator import StatsReport, fetch_and_summarize
from gh_pr_stats.config import Config, ConfigurationError, resolve_config
from gh_pr_stats.github.http import TransportError
from gh_pr_stats.logging import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="gh-pr-stats")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
@click.option("--json-logs", is_flag=True, default=False, help="Emit logs as JSON lines")
@click.pass_context
def main(ctx: click.Context, verbose: bool, json_logs: bool) -> None:
    """Pull request statistics for a GitHub repository.

    \b
    Quick Start:
        export GITHUB_TOKEN=...
        gh-pr-stats stats rails/rails --max-pages 5
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose=verbose, json_format=json_logs)


@main.command()
@click.argument("repo", required=False)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yaml file",
)
@click.option(
    "--state",
    type=click.Choice(["open", "closed", "all"]),
    default=None,
    help="Pull request state filter [default: closed]",
)
@click.option(
    "--max-pages",
    type=int,
    default=None,
    help="Highest page to fetch, -1 for all pages [default: -1]",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    envvar="GH_PR_STATS_WORKERS",
    help="Concurrent page workers [default: 2]",
)
@click.option(
    "--token-env",
    default=None,
    help="Environment variable holding the GitHub token [default: GITHUB_TOKEN]",
)
@click.option("--top", type=int, default=None, help="Number of top authors to show [default: 3]")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Hide the progress display")
@click.pass_context
def stats(
    ctx: click.Context,
    repo: str | None,
    config: Path | None,
    state: str | None,
    max_pages: int | None,
    workers: int | None,
    token_env: str | None,
    top: int | None,
    quiet: bool,
) -> None:
    """Fetch every pull request page of REPO (owner/name) and summarize it.

    Pages after the first are fetched concurrently by a pool of workers.
    The summary lists the fetched count, elapsed time, top authors and
    the fastest and slowest time-to-close.
    """
    try:
        cfg = resolve_config(
            config,
            target__repo=repo,
            target__state=state,
            fetch__max_pages=max_pages,
            fetch__workers=workers,
            auth__token_env=token_env,
            report__top_authors=top,
        )
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise click.Abort() from e

    try:
        report = asyncio.run(_run(cfg, quiet=quiet))
    except KeyboardInterrupt:
        console.print("\n[yellow]Fetch interrupted by user[/yellow]")
        raise click.Abort() from None
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise click.Abort() from e
    except TransportError as e:
        console.print(f"[bold red]Fetch failed:[/bold red] {escape(str(e))}")
        if ctx.obj.get("verbose"):
            console.print_exception()
        raise click.Abort() from e

    _print_report(report, top_n=cfg.report.top_authors)


async def _run(cfg: Config, quiet: bool) -> StatsReport:
    if quiet:
        return await fetch_and_summarize(cfg)

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        TextColumn("[cyan]{task.fields[records]} PRs"),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=True,
    ) as progress:
        task = progress.add_task(f"Fetching {cfg.target.repo}", total=None, records=0)
        fetched = 0

        def on_page(page: int, count: int) -> None:
            nonlocal fetched
            fetched += count
            progress.update(task, advance=1, records=fetched)

        return await fetch_and_summarize(cfg, on_page=on_page)


def _print_report(report: StatsReport, top_n: int) -> None:
    result = report.fetch
    summary = report.summary

    console.print(f"Fetched {summary.record_count} PRs")
    console.print(f"Estimated total {result.total_estimate} PRs")
    console.print(f"Elapsed {result.elapsed_seconds:.2f}s ({result.pages_fetched} pages)")

    authors = ", ".join(f"{escape(author)} ({count})" for author, count in summary.top_authors)
    console.print(f"Top {top_n} PR authors: {authors or 'no data'}")

    if summary.turnaround is None:
        console.print("Smallest time-to-close: no data")
        console.print("Biggest time-to-close: no data")
    else:
        console.print(f"Smallest time-to-close {summary.turnaround.fastest:.0f}s")
        console.print(f"Biggest time-to-close {summary.turnaround.slowest:.0f}s")
