"""External tool invocation and installation.

Functions:
    find_sources(root)                   -> list[Path]
    count_source_lines(paths)            -> int
    run_checkstyle(config, sources)      -> ToolResult
    compile_sources(config, sources)     -> ToolResult
    run_spotbugs(config)                 -> ToolResult
    install_tools(dest)                  -> dict[str, Path]

A tool that exits non-zero or cannot be started produces a failed
``ToolResult``; nothing is raised and no text is added to the report files.
"""

import io
import os
import stat
import subprocess
import tarfile
from pathlib import Path

import requests

from quality_report.config import Config
from quality_report.models import ToolResult

CHECKSTYLE_VERSION = "8.45.1"
SPOTBUGS_VERSION = "4.5.0"

CHECKSTYLE_JAR_URL = (
    "https://github.com/checkstyle/checkstyle/releases/download/"
    f"checkstyle-{CHECKSTYLE_VERSION}/checkstyle-{CHECKSTYLE_VERSION}-all.jar"
)
CHECKSTYLE_CONFIG_URL = (
    "https://raw.githubusercontent.com/checkstyle/checkstyle/"
    f"checkstyle-{CHECKSTYLE_VERSION}/src/main/resources/google_checks.xml"
)
SPOTBUGS_URL = (
    "https://repo1.maven.org/maven2/com/github/spotbugs/spotbugs/"
    f"{SPOTBUGS_VERSION}/spotbugs-{SPOTBUGS_VERSION}.tgz"
)

CHECKSTYLE_REPORT = "checkstyle.txt"
SPOTBUGS_REPORT = "spotbugs.txt"


class ToolInstallError(Exception):
    """Raised when a tool cannot be downloaded or unpacked."""


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def find_sources(root: str | Path, pattern: str = "*.java") -> list[Path]:
    return sorted(p for p in Path(root).rglob(pattern) if p.is_file())


def count_source_lines(paths: list[Path]) -> int:
    """Sum of physical line counts (newline characters) across *paths*."""
    return sum(path.read_bytes().count(b"\n") for path in paths)


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------

def _read_report(path: Path) -> str:
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8", errors="replace")


def _prepare_output(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        path.unlink()


def _invoke(name: str, args: list[str], report_path: Path | None = None) -> ToolResult:
    """Run *args* and wrap the outcome in a ToolResult.

    The report is read from *report_path* when given, otherwise it is the
    captured stderr of the process.
    """
    try:
        completed = subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        return ToolResult.failure(name, f"could not start '{args[0]}': {exc}")

    report = _read_report(report_path) if report_path else (completed.stderr or "")
    if completed.returncode == 0:
        return ToolResult.success(name, report=report)

    cause = f"{name} exited with status {completed.returncode}"
    detail = (completed.stderr or "").strip().splitlines()
    if detail:
        cause += f": {detail[-1][:200]}"
    return ToolResult.failure(name, cause, report=report, returncode=completed.returncode)


def run_checkstyle(config: Config, sources: list[Path]) -> ToolResult:
    """Run Checkstyle in plain-text mode, writing ``checkstyle.txt``."""
    output = Path(config.work_dir) / CHECKSTYLE_REPORT
    _prepare_output(output)

    args = [
        config.tools.java, "-jar", config.tools.checkstyle_jar,
        "-c", config.tools.checkstyle_config,
        "-f", "plain",
        "-o", str(output),
        *(str(p) for p in sources),
    ]
    return _invoke("checkstyle", args, output)


def compile_sources(config: Config, sources: list[Path]) -> ToolResult:
    """Compile *sources* in place with javac.

    Stale ``*.class`` files under the source root are removed first. The
    report text is javac's diagnostic output.
    """
    for stale in find_sources(config.source_root, "*.class"):
        stale.unlink()

    args = [config.tools.javac, *(str(p) for p in sources)]
    return _invoke("javac", args)


def run_spotbugs(config: Config) -> ToolResult:
    """Run SpotBugs over the compiled classes, writing ``spotbugs.txt``."""
    output = Path(config.work_dir) / SPOTBUGS_REPORT
    _prepare_output(output)

    classes = find_sources(config.source_root, "*.class")
    args = [
        config.tools.spotbugs, "-textui",
        "-output", str(output),
        *(str(p) for p in classes),
    ]
    return _invoke("spotbugs", args, output)


# ---------------------------------------------------------------------------
# Installation
# ---------------------------------------------------------------------------

def _download(session: requests.Session, url: str, timeout: int) -> bytes:
    try:
        response = session.get(url, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise ToolInstallError(f"Unable to download '{url}': {exc}") from exc
    if not response.ok:
        raise ToolInstallError(f"Download of '{url}' failed with HTTP {response.status_code}")
    return response.content


def _extract_tgz(data: bytes, dest: Path) -> None:
    dest_root = dest.resolve()
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            for member in archive.getmembers():
                target = (dest / member.name).resolve()
                if dest_root not in target.parents and target != dest_root:
                    raise ToolInstallError(f"Refusing to extract '{member.name}' outside {dest}")
            if hasattr(tarfile, "data_filter"):
                archive.extractall(dest, filter="data")
            else:
                archive.extractall(dest)
    except tarfile.TarError as exc:
        raise ToolInstallError(f"Corrupt SpotBugs archive: {exc}") from exc


def install_tools(dest: str | Path = ".", timeout: int = 120) -> dict[str, Path]:
    """Download the pinned Checkstyle and SpotBugs releases into *dest*.

    Returns the paths of the Checkstyle jar, its configuration and the
    SpotBugs launcher (made executable).

    Raises:
        ToolInstallError: on network, HTTP or archive errors.
    """
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    session = requests.Session()

    jar = dest / "checkstyle.jar"
    jar.write_bytes(_download(session, CHECKSTYLE_JAR_URL, timeout))

    checks = dest / "checkstyle-config.xml"
    checks.write_bytes(_download(session, CHECKSTYLE_CONFIG_URL, timeout))

    _extract_tgz(_download(session, SPOTBUGS_URL, timeout), dest)
    launcher = dest / f"spotbugs-{SPOTBUGS_VERSION}" / "bin" / "spotbugs"
    if not launcher.exists():
        raise ToolInstallError(f"SpotBugs launcher missing after extraction: {launcher}")
    mode = os.stat(launcher).st_mode
    launcher.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    return {
        "checkstyle_jar":    jar,
        "checkstyle_config": checks,
        "spotbugs":          launcher,
    }
