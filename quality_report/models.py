"""Data models for quality reports.

Contains dataclasses used to carry values between pipeline steps and to
serialize the JSON output:
    - ToolResult       outcome of one external tool (success or failure)
    - ViolationCounts  line counts extracted from the tool reports
    - QualityMetrics   the three derived quality values
"""

from dataclasses import asdict, dataclass, field


# ---------------------------------------------------------------------------
# Tool results
# ---------------------------------------------------------------------------

@dataclass
class ToolResult:
    """Outcome of a single external tool invocation.

    ``report`` always holds what the tool actually wrote (possibly empty);
    a failure is signalled by ``ok=False`` and ``cause``, never by text
    appended to the report.
    """

    name: str
    ok: bool
    report: str = ""
    returncode: int | None = None
    cause: str | None = None

    @classmethod
    def success(cls, name: str, report: str = "", returncode: int = 0) -> "ToolResult":
        return cls(name=name, ok=True, report=report, returncode=returncode)

    @classmethod
    def failure(
        cls,
        name: str,
        cause: str,
        report: str = "",
        returncode: int | None = None,
    ) -> "ToolResult":
        return cls(name=name, ok=False, report=report, returncode=returncode, cause=cause)

    def to_dict(self) -> dict:
        return {
            "status":     "ok" if self.ok else "failed",
            "returncode": self.returncode,
            "cause":      self.cause,
        }


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ViolationCounts:
    """Line counts taken from the style and bug reports.

    ``errors``, ``warnings`` and ``conventions`` are independent substring
    matches, so one line can contribute to several of them.
    """

    report_lines: int = 0
    style_violations: int = 0
    errors: int = 0
    warnings: int = 0
    conventions: int = 0
    bugs: int = 0

    @property
    def lloc(self) -> int:
        return self.errors + self.warnings + self.conventions + self.bugs

    @property
    def total_violations(self) -> int:
        return self.style_violations + self.bugs


@dataclass(frozen=True)
class QualityMetrics:
    checkstyle_quality: float
    overall_quality: float
    quality_score: float
    source_lines: int = 0
    counts: ViolationCounts = field(default_factory=ViolationCounts)

    def to_dict(self) -> dict:
        counts = asdict(self.counts)
        counts["lloc"] = self.counts.lloc
        return {
            "checkstyle_quality": self.checkstyle_quality,
            "overall_quality":    self.overall_quality,
            "quality_score":      self.quality_score,
            "source_lines":       self.source_lines,
            "counts":             counts,
        }
