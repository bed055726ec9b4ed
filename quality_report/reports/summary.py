"""JSON summary of a quality run.

Functions:
    build_summary(metrics, tools=None, extra=None) -> dict
"""

from datetime import datetime, timezone

from quality_report.models import QualityMetrics, ToolResult


def build_summary(
    metrics: QualityMetrics,
    tools: dict[str, ToolResult] | None = None,
    extra: dict | None = None,
) -> dict:
    data = metrics.to_dict()
    return {
        "report_type":  "quality",
        "generated_at": datetime.now(timezone.utc).isoformat(),
        **(extra or {}),
        "metrics": {
            "checkstyle_quality": data["checkstyle_quality"],
            "overall_quality":    data["overall_quality"],
            "quality_score":      data["quality_score"],
        },
        "counts":       data["counts"],
        "source_lines": data["source_lines"],
        "tools":        {name: result.to_dict() for name, result in (tools or {}).items()},
    }
