"""HTML report rendering.

Functions:
    render_html(metrics, checkstyle, javac, spotbugs)      -> str
    write_html(path, metrics, checkstyle, javac, spotbugs) -> Path

The document has a fixed layout: a title, one ``<pre>`` section per tool
report, then the checkstyle percentage and the quality score.
"""

from pathlib import Path

from jinja2 import BaseLoader, Environment

from quality_report.models import QualityMetrics, ToolResult

REPORT_FILENAME = "code-quality-report.html"
TITLE = "Java Code Quality Report"

NO_COMPILATION_ERRORS = "No compilation errors."
NO_SPOTBUGS_ISSUES = "No SpotBugs issues detected."

HTML_TEMPLATE = """\
<html><body><h1>{{ title }}</h1>
<h2>Checkstyle Report</h2>
{%- if checkstyle_failure %}<p class="tool-failure">{{ checkstyle_failure }}</p>{% endif %}
<pre>{{ checkstyle }}</pre>
<h2>Compilation Errors</h2>
{%- if javac_failure %}<p class="tool-failure">{{ javac_failure }}</p>{% endif %}
<pre>{{ compilation }}</pre>
<h2>SpotBugs Report</h2>
{%- if spotbugs_failure %}<p class="tool-failure">{{ spotbugs_failure }}</p>{% endif %}
<pre>{{ spotbugs }}</pre>
<h2>Checkstyle Quality Percentage</h2><p>Checkstyle Quality: {{ checkstyle_quality }}%</p>
<h2>Overall Quality Score</h2><p>Overall Quality: {{ quality_score }}</p>
</body></html>
"""

_env = Environment(loader=BaseLoader(), autoescape=True)


def _failure(result: ToolResult | None) -> str | None:
    if result is None or result.ok:
        return None
    return f"{result.name} did not complete: {result.cause}"


def _format_number(value: float) -> str:
    return f"{value:.2f}"


def render_html(
    metrics: QualityMetrics,
    checkstyle: ToolResult | None = None,
    javac: ToolResult | None = None,
    spotbugs: ToolResult | None = None,
) -> str:
    """Render the consolidated report.

    Empty compilation output and an empty SpotBugs report are replaced by
    fixed placeholder sentences. Report text is HTML-escaped.
    """
    template = _env.from_string(HTML_TEMPLATE)
    compilation = javac.report.strip() if javac else ""
    bugs = spotbugs.report if spotbugs else ""

    return template.render(
        title=TITLE,
        checkstyle=checkstyle.report if checkstyle else "",
        compilation=compilation or NO_COMPILATION_ERRORS,
        spotbugs=bugs if bugs.strip() else NO_SPOTBUGS_ISSUES,
        checkstyle_failure=_failure(checkstyle),
        javac_failure=_failure(javac),
        spotbugs_failure=_failure(spotbugs),
        checkstyle_quality=_format_number(metrics.checkstyle_quality),
        quality_score=_format_number(metrics.quality_score),
    )


def write_html(
    path: str | Path,
    metrics: QualityMetrics,
    checkstyle: ToolResult | None = None,
    javac: ToolResult | None = None,
    spotbugs: ToolResult | None = None,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_html(metrics, checkstyle, javac, spotbugs), encoding="utf-8")
    return path
