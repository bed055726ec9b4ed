"""Quality score aggregation.

Functions:
    count_violations(style_report, bug_report)           -> ViolationCounts
    checkstyle_quality(violations, total_report_lines)   -> float
    overall_quality(total_violations, total_source_lines) -> float
    quality_score(counts, clamp=False)                   -> float
    aggregate(style_report, bug_report, source_lines)    -> QualityMetrics

All matching is plain line-oriented text matching on the tool output:

* a style violation is a line starting with a digit;
* ``error`` / ``warning`` / ``style`` are case-sensitive substrings and the
  three categories overlap (a line may be counted in several, or in none);
* a bug is a line containing ``BugInstance``.
"""

import re
import warnings

from quality_report.models import QualityMetrics, ViolationCounts

_VIOLATION_RE = re.compile(r"^[0-9]")

BUG_MARKER = "BugInstance"
ERROR_TOKEN = "error"
WARNING_TOKEN = "warning"
CONVENTION_TOKEN = "style"

#: Weight of an ``error`` line relative to the other categories
ERROR_WEIGHT = 5

SCORE_MIN = 0.0
SCORE_MAX = 10.0


# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------

def _lines(text: str | None) -> list[str]:
    """Split on newlines only; a trailing newline does not start a new line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _count_containing(lines: list[str], token: str) -> int:
    return sum(1 for line in lines if token in line)


def count_violations(style_report: str | None, bug_report: str | None) -> ViolationCounts:
    """Count violation lines in the raw report texts.

    ``None`` and empty strings are both treated as a report with no lines.
    """
    style_lines = _lines(style_report)
    bug_lines = _lines(bug_report)

    return ViolationCounts(
        report_lines=len(style_lines),
        style_violations=sum(1 for line in style_lines if _VIOLATION_RE.match(line)),
        errors=_count_containing(style_lines, ERROR_TOKEN),
        warnings=_count_containing(style_lines, WARNING_TOKEN),
        conventions=_count_containing(style_lines, CONVENTION_TOKEN),
        bugs=_count_containing(bug_lines, BUG_MARKER),
    )


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------

def checkstyle_quality(violations: int, total_report_lines: int) -> float:
    """Percentage of style report lines that are not violations.

    Returns 100 for an empty report.
    """
    if total_report_lines <= 0:
        return 100.0
    return round((1 - violations / total_report_lines) * 100, 2)


def overall_quality(total_violations: int, total_source_lines: int) -> float:
    """Percentage of source lines not matched by a style or bug violation.

    Returns 100 when there are no source lines, whatever the violation count.
    """
    if total_source_lines <= 0:
        return 100.0
    return round((1 - total_violations / total_source_lines) * 100, 2)


def quality_score(counts: ViolationCounts, clamp: bool = False) -> float:
    """Weighted 0-10 score with errors weighted five times the other categories.

    Returns 0 when no category line was found at all. Without *clamp* the
    value is unbounded below: an error-heavy report yields a negative score.
    """
    lloc = counts.lloc
    if lloc == 0:
        return 0.0

    weighted = ERROR_WEIGHT * counts.errors + counts.warnings + counts.conventions + counts.bugs
    score = round(10.0 - (weighted / lloc) * 10, 2)

    if clamp:
        return min(SCORE_MAX, max(SCORE_MIN, score))
    return score


def aggregate(
    style_report: str | None,
    bug_report: str | None,
    source_lines: int,
    *,
    clamp: bool = False,
) -> QualityMetrics:
    """Compute all three quality values from the raw reports."""
    counts = count_violations(style_report, bug_report)
    score = quality_score(counts, clamp=clamp)

    if not SCORE_MIN <= score <= SCORE_MAX:
        warnings.warn(
            f"Quality score {score} is outside the 0-10 range "
            f"(errors={counts.errors}, lloc={counts.lloc}). "
            "Enable scoring.clamp to bound it.",
            UserWarning,
            stacklevel=2,
        )

    return QualityMetrics(
        checkstyle_quality=checkstyle_quality(counts.style_violations, counts.report_lines),
        overall_quality=overall_quality(counts.total_violations, source_lines),
        quality_score=score,
        source_lines=source_lines,
        counts=counts,
    )
