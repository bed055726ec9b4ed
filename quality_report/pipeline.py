"""End-to-end quality run.

Each step hands its result to the next as a return value:

    run_tools -> aggregate -> write_html -> stage_report/publish_report -> submit
"""

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path

import click

from quality_report.client import ScoringClient
from quality_report.config import Config
from quality_report.models import QualityMetrics, ToolResult
from quality_report.publish import publish_report, stage_report
from quality_report.reports.html import REPORT_FILENAME, write_html
from quality_report.scoring import aggregate
from quality_report.tools import (
    compile_sources,
    count_source_lines,
    find_sources,
    run_checkstyle,
    run_spotbugs,
)


@dataclass
class ToolRun:
    checkstyle: ToolResult
    javac: ToolResult
    spotbugs: ToolResult
    source_lines: int = 0

    def as_dict(self) -> dict[str, ToolResult]:
        return {"checkstyle": self.checkstyle, "javac": self.javac, "spotbugs": self.spotbugs}

    @property
    def failures(self) -> list[ToolResult]:
        return [r for r in self.as_dict().values() if not r.ok]


@dataclass
class PipelineResult:
    tools: ToolRun
    metrics: QualityMetrics
    report_path: Path
    committed: bool | None = None
    submitted: bool = False
    api_response: dict = field(default_factory=dict)


def _log(message: str, verbose: bool) -> None:
    if verbose:
        click.echo(f"[verbose] {message}", err=True)


def run_tools(config: Config, verbose: bool = False) -> ToolRun:
    """Run Checkstyle, javac and SpotBugs in order.

    A failing tool never stops the run; its failure is recorded in the
    returned ToolRun and reported as a warning.
    """
    sources = find_sources(config.source_root)
    source_lines = count_source_lines(sources)
    _log(f"Found {len(sources)} Java files ({source_lines} lines) under '{config.source_root}'", verbose)

    checkstyle = run_checkstyle(config, sources)
    _log(f"checkstyle: {'ok' if checkstyle.ok else checkstyle.cause}", verbose)
    javac = compile_sources(config, sources)
    _log(f"javac: {'ok' if javac.ok else javac.cause}", verbose)
    spotbugs = run_spotbugs(config)
    _log(f"spotbugs: {'ok' if spotbugs.ok else spotbugs.cause}", verbose)

    run = ToolRun(checkstyle=checkstyle, javac=javac, spotbugs=spotbugs, source_lines=source_lines)
    for failed in run.failures:
        warnings.warn(f"{failed.name} failed: {failed.cause}", UserWarning, stacklevel=2)
    return run


def export_github_env(metrics: QualityMetrics, environ: dict | None = None) -> list[Path]:
    """Append the metrics to ``$GITHUB_ENV`` / ``$GITHUB_OUTPUT`` when set.

    Returns the files written to. Outside GitHub Actions this is a no-op.
    """
    environ = os.environ if environ is None else environ
    written: list[Path] = []

    env_file = environ.get("GITHUB_ENV")
    if env_file:
        with open(env_file, "a", encoding="utf-8") as f:
            f.write(f"quality_score={metrics.quality_score}\n")
        written.append(Path(env_file))

    output_file = environ.get("GITHUB_OUTPUT")
    if output_file:
        with open(output_file, "a", encoding="utf-8") as f:
            f.write(f"checkstyle_quality={metrics.checkstyle_quality}\n")
            f.write(f"overall_quality={metrics.overall_quality}\n")
        written.append(Path(output_file))

    return written


def submit_score(config: Config, quality_score: float) -> dict:
    client = ScoringClient(
        url=config.api.url,
        client_public=config.api.client_public,
        client_secret=config.api.client_secret,
    )
    return client.submit_quality(
        user_id=config.api.user_id,
        project_id=config.api.project_id,
        quality_score=quality_score,
    )


def run_pipeline(
    config: Config,
    *,
    publish: bool = True,
    submit: bool = True,
    repo_root: str | Path = ".",
    verbose: bool = False,
) -> PipelineResult:
    """Analyze, score, render, publish and submit, in that order.

    Publishing and submission also require the matching config section to
    be enabled. Git and API errors propagate to the caller.
    """
    tools = run_tools(config, verbose=verbose)

    metrics = aggregate(
        tools.checkstyle.report,
        tools.spotbugs.report,
        tools.source_lines,
        clamp=config.clamp,
    )
    _log(
        f"checkstyle_quality={metrics.checkstyle_quality} "
        f"overall_quality={metrics.overall_quality} "
        f"quality_score={metrics.quality_score}",
        verbose,
    )
    export_github_env(metrics)

    report_path = write_html(
        Path(config.work_dir) / REPORT_FILENAME,
        metrics,
        checkstyle=tools.checkstyle,
        javac=tools.javac,
        spotbugs=tools.spotbugs,
    )
    result = PipelineResult(tools=tools, metrics=metrics, report_path=report_path)

    if publish and config.publish.enabled:
        docs_dir = Path(repo_root) / config.publish.docs_dir
        result.report_path = stage_report(report_path, docs_dir, config.publish.username)
        _log(f"Report staged at '{result.report_path}'", verbose)
        result.committed = publish_report(
            repo_root,
            result.report_path,
            username=config.publish.username,
            repository=config.publish.repository,
            branch=config.publish.branch,
            token=config.publish.token,
        )
        _log(f"Pushed to {config.publish.repository}@{config.publish.branch}", verbose)

    if submit and config.api.enabled:
        result.api_response = submit_score(config, metrics.quality_score)
        result.submitted = True
        _log(f"Submitted quality score for project {config.api.project_id}", verbose)

    return result
