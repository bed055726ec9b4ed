"""Java code quality report: Checkstyle and SpotBugs aggregation and scoring."""

__version__ = "0.1.0"
