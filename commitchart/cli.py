"""
Command-line interface for commitchart.

Provides commands for running the chart job, inspecting the cache, and
exporting weekly series.
"""
import sys
from pathlib import Path
from typing import Optional

import click

from commitchart.aggregation import aggregate_weekly
from commitchart.cache import CommitCache
from commitchart.config import ChartConfig
from commitchart.errors import CommitChartError, RunTimeout
from commitchart.pipeline import build_pipeline

TIMEOUT_EXIT_CODE = 124

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="COMMITCHART_CONFIG",
    help="YAML file listing the tracked repositories",
)
cache_option = click.option(
    "--cache",
    "cache_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="COMMITCHART_CACHE",
    help="Commit cache file (default: cache/data.json)",
)


def load_config(config_path: Optional[Path] = None, **overrides) -> ChartConfig:
    """Build the run configuration from an optional YAML file and overrides."""
    try:
        config = ChartConfig.from_yaml(config_path) if config_path else ChartConfig()
        return config.with_overrides(**overrides)
    except CommitChartError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
def main():
    """commitchart - weekly commit activity charts."""
    pass


@main.command()
@config_option
@cache_option
@click.option(
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="COMMITCHART_OUTPUT",
    help="Directory for chart images (default: output)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    envvar="COMMITCHART_TIMEOUT",
    help="Abort the run after this many seconds (default: 600)",
)
@click.option("--keep-going", is_flag=True, help="Continue past failing repositories")
def run(config_path, cache_path, output_dir, timeout, keep_going):
    """
    Fetch missing histories and render all charts.

    Repositories already present in the cache are never fetched again. The
    cache file is only rewritten when something was fetched.
    """
    config = load_config(config_path, cache_path=cache_path, output_dir=output_dir, timeout=timeout)
    pipeline = build_pipeline(config, keep_going=keep_going, progress=click.echo)

    try:
        summary = pipeline.run()
    except RunTimeout as e:
        click.echo(f"Timeout: {e}", err=True)
        sys.exit(TIMEOUT_EXIT_CODE)
    except CommitChartError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not summary.cache_found:
        click.echo(f"No cache at {config.cache_path}, started from scratch")
    if summary.cache_saved:
        click.echo(f"  ✓ Cached {len(summary.fetched)} new histories in {config.cache_path}")
    for path in summary.charts.values():
        click.echo(f"  ✓ Wrote {path}")

    if summary.failures:
        for failure in summary.failures:
            click.echo(f"  ✗ {failure.stage} failed: {failure.error}", err=True)
        sys.exit(1)


@main.command()
@config_option
@cache_option
def status(config_path, cache_path):
    """
    Show cached histories.

    Lists every configured repository with its cached commit count. Nothing
    is fetched or written.
    """
    config = load_config(config_path, cache_path=cache_path)
    cache = CommitCache(config.cache_path, config.repositories)

    try:
        found = cache.load()
    except CommitChartError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not found:
        click.echo(f"No cache at {config.cache_path} yet.")

    click.echo(f"Tracked repositories ({len(cache)}):")
    for url in cache:
        series = cache[url]
        if series.is_empty:
            click.echo(f"  - {series.name}: not fetched ({url})")
        else:
            click.echo(f"  - {series.name}: {len(series.commits)} commits ({url})")


@main.command()
@click.argument("repository")
@config_option
@cache_option
@click.option("--export-csv", type=click.Path(path_type=Path), help="Export to CSV file")
@click.option("--export-json", type=click.Path(path_type=Path), help="Export to JSON file")
def weekly(repository, config_path, cache_path, export_csv, export_json):
    """
    Display the weekly series of a cached repository.

    REPOSITORY is the URL or the display name of a tracked repository.
    """
    config = load_config(config_path, cache_path=cache_path)
    tracked = config.find(repository)
    if tracked is None:
        click.echo(f"Error: Repository '{repository}' is not configured", err=True)
        click.echo("Run 'commitchart status' to see tracked repositories")
        sys.exit(1)

    cache = CommitCache(config.cache_path, config.repositories)
    try:
        cache.load()
    except CommitChartError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    series = aggregate_weekly(cache[tracked.url].commits)
    if not series.buckets:
        click.echo(f"No cached commits for {tracked.name}. Run 'commitchart run' first.")
        return

    df = series.to_dataframe()
    if export_csv:
        df.to_csv(export_csv, index=False)
        click.echo(f"Exported to {export_csv}")
    elif export_json:
        df.to_json(export_json, orient="records", date_format="iso", indent=2)
        click.echo(f"Exported to {export_json}")
    else:
        click.echo(f"Repository: {tracked.name}")
        click.echo("=" * 50)
        click.echo(f"Total Commits: {series.total}")
        click.echo(f"Busiest Week: {series.max_count} commits")
        click.echo()
        click.echo(df.to_string(index=False))


if __name__ == "__main__":
    main()
