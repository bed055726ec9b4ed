"""CLI entry point - command definitions using Click.

Commands:
    init      Generate a template config file
    install   Download Checkstyle and SpotBugs
    score     Compute quality metrics from existing report files
    run       Analyze, score, render, publish and submit
    submit    Send an already computed score to the scoring API
"""

import json
import sys
from pathlib import Path
from typing import Any

import click

from quality_report import __version__


# ---------------------------------------------------------------------------
# Helpers shared by all commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context, **kwargs):
    """Load the config file. Exits on error."""
    from quality_report.config import ConfigError, load

    try:
        return load(ctx.obj["config_path"], **kwargs)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


def _emit_json(data: Any, ctx: click.Context) -> None:
    """Write JSON to stdout or to the file specified by --output."""
    obj = ctx.obj
    indent = 2 if obj["pretty"] else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    output_path: str | None = obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Summary written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _handle_errors(func):
    """Decorator that catches client, publish and install errors and exits cleanly."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from quality_report.client import (
            AuthenticationError,
            NetworkError,
            NotFoundError,
            ScoringClientError,
        )
        from quality_report.publish import PublishError
        from quality_report.tools import ToolInstallError

        try:
            return func(*args, **kwargs)
        except PublishError as exc:
            click.echo(f"Publish error: {exc}", err=True)
            sys.exit(1)
        except ToolInstallError as exc:
            click.echo(f"Install error: {exc}", err=True)
            sys.exit(1)
        except AuthenticationError as exc:
            click.echo(f"Authentication error: {exc}", err=True)
            sys.exit(1)
        except NotFoundError as exc:
            click.echo(f"Not found: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except ScoringClientError as exc:
            click.echo(f"Scoring API error: {exc}", err=True)
            sys.exit(1)

    return wrapper


def _read_optional(path: str | None) -> str:
    """Return the file content, or an empty string when it does not exist."""
    if not path:
        return ""
    p = Path(path)
    if not p.exists():
        return ""
    return p.read_text(encoding="utf-8", errors="replace")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="quality-config.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--output", "output_path", default=None,
              help="Write the JSON summary to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="quality-report")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """Java code quality report - run Checkstyle and SpotBugs, score, publish."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["config_explicit"] = (
        ctx.get_parameter_source("config_path") is not click.core.ParameterSource.DEFAULT
    )
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="quality-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template quality-config.yaml file."""
    from quality_report.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your repository, scoring API credentials and tool paths.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------

@cli.command("install")
@click.option("--dest", default=".", show_default=True,
              help="Directory to download the tools into.")
@click.pass_context
@_handle_errors
def install_command(ctx: click.Context, dest: str) -> None:
    """Download Checkstyle (with Google checks) and SpotBugs."""
    from quality_report.tools import install_tools

    if ctx.obj["verbose"]:
        click.echo(f"[verbose] Downloading tools into '{dest}'", err=True)

    paths = install_tools(dest)
    for name, path in paths.items():
        click.echo(f"{name}: {path}")


# ---------------------------------------------------------------------------
# score
# ---------------------------------------------------------------------------

@cli.command("score")
@click.option("--checkstyle", "checkstyle_path", default="checkstyle.txt", show_default=True,
              help="Checkstyle plain-text report. A missing file counts as empty.")
@click.option("--spotbugs", "spotbugs_path", default="spotbugs.txt", show_default=True,
              help="SpotBugs text report. A missing file counts as empty.")
@click.option("--source-root", default=".", show_default=True,
              help="Directory whose *.java files give the source line count.")
@click.option("--source-lines", type=click.IntRange(min=0), default=None,
              help="Use this source line count instead of scanning --source-root.")
@click.option("--clamp", is_flag=True, default=False,
              help="Bound the quality score to the 0-10 range.")
@click.pass_context
def score_command(ctx: click.Context, checkstyle_path: str, spotbugs_path: str,
                  source_root: str, source_lines: int | None, clamp: bool) -> None:
    """Compute quality metrics from existing Checkstyle and SpotBugs reports."""
    from quality_report.reports.summary import build_summary
    from quality_report.scoring import aggregate
    from quality_report.tools import count_source_lines, find_sources

    if source_lines is None:
        source_lines = count_source_lines(find_sources(source_root))

    for path in (checkstyle_path, spotbugs_path):
        if not Path(path).exists():
            click.echo(f"Warning: '{path}' not found, treating it as an empty report.", err=True)

    metrics = aggregate(
        _read_optional(checkstyle_path),
        _read_optional(spotbugs_path),
        source_lines,
        clamp=clamp,
    )

    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {metrics.counts}", err=True)

    _emit_json(build_summary(metrics), ctx)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------

@cli.command("run")
@click.option("--username", default=None,
              help="Report folder name under docs/ (overrides publish.username).")
@click.option("--no-publish", is_flag=True, default=False,
              help="Skip the git commit and push.")
@click.option("--no-submit", is_flag=True, default=False,
              help="Skip the scoring API call.")
@click.option("--fail-on-tool-error", is_flag=True, default=False,
              help="Exit with status 2 if any analysis tool failed.")
@click.pass_context
@_handle_errors
def run_command(ctx: click.Context, username: str | None, no_publish: bool,
                no_submit: bool, fail_on_tool_error: bool) -> None:
    """Run the full quality pipeline.

    Without a config file at the default path, the run uses the built-in
    defaults plus the environment overrides.
    """
    from quality_report.pipeline import run_pipeline
    from quality_report.reports.summary import build_summary

    config_path = ctx.obj["config_path"]
    allow_missing = not ctx.obj["config_explicit"]
    if allow_missing and not Path(config_path).exists():
        click.echo(
            f"Warning: '{config_path}' not found, using defaults and environment variables.",
            err=True,
        )

    config = _load_config(
        ctx,
        allow_missing=allow_missing,
        require_publish=not no_publish,
        require_api=not no_submit,
    )
    if username:
        config.publish.username = username

    result = run_pipeline(
        config,
        publish=not no_publish,
        submit=not no_submit,
        verbose=ctx.obj["verbose"],
    )

    click.echo(f"Checkstyle Quality Percentage: {result.metrics.checkstyle_quality}", err=True)
    click.echo(f"SpotBugs Violations Count: {result.metrics.counts.bugs}", err=True)
    click.echo(f"Overall Code Quality Percentage: {result.metrics.overall_quality}", err=True)
    click.echo(f"Quality Score: {result.metrics.quality_score}", err=True)

    summary = build_summary(
        result.metrics,
        tools=result.tools.as_dict(),
        extra={
            "report_path": str(result.report_path),
            "published":   result.committed is not None,
            "submitted":   result.submitted,
        },
    )
    _emit_json(summary, ctx)

    if fail_on_tool_error and result.tools.failures:
        names = ", ".join(r.name for r in result.tools.failures)
        click.echo(f"Tool failure: {names}", err=True)
        sys.exit(2)


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------

@cli.command("submit")
@click.argument("quality_score", type=float)
@click.pass_context
@_handle_errors
def submit_command(ctx: click.Context, quality_score: float) -> None:
    """Send QUALITY_SCORE to the scoring API configured in the api section."""
    from quality_report.pipeline import submit_score

    config = _load_config(ctx)
    if not config.api.enabled:
        click.echo("Configuration error: the api section is disabled.", err=True)
        sys.exit(1)

    if ctx.obj["verbose"]:
        click.echo(f"[verbose] Posting score {quality_score} to {config.api.url}", err=True)

    response = submit_score(config, quality_score)
    _emit_json(response, ctx)
