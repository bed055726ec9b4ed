"""Configuration loading and validation.

Usage:
    config = load("quality-config.yaml")       # raises ConfigError on bad config
    config.publish.username                    # "default-user"
    generate_template("quality-config.yaml")   # writes example file to disk
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass
class ToolsConfig:
    java: str = "java"
    javac: str = "javac"
    checkstyle_jar: str = "checkstyle.jar"
    checkstyle_config: str = "checkstyle-config.xml"
    spotbugs: str = "./spotbugs-4.5.0/bin/spotbugs"


@dataclass
class PublishConfig:
    enabled: bool = True
    docs_dir: str = "docs"
    username: str = "default-user"
    repository: str = ""
    branch: str = "main"
    token: str = ""


@dataclass
class ApiConfig:
    enabled: bool = True
    url: str = ""
    user_id: str = ""
    client_public: str = ""
    client_secret: str = ""
    project_id: str = ""


@dataclass
class Config:
    source_root: str = "."
    work_dir: str = "."
    clamp: bool = False
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    api: ApiConfig = field(default_factory=ApiConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(
    config_path: str = "quality-config.yaml",
    *,
    allow_missing: bool = False,
    require_publish: bool = True,
    require_api: bool = True,
) -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables override file values:
        GH_PAT                     publish.token
        QUALITY_USERNAME           publish.username
        QUALITY_API_URL            api.url
        QUALITY_API_USER_ID        api.user_id
        QUALITY_API_CLIENT_PUBLIC  api.client_public
        QUALITY_API_CLIENT_SECRET  api.client_secret
        QUALITY_PROJECT_ID         api.project_id

    GITHUB_REPOSITORY fills ``publish.repository`` only when the file leaves
    it empty, so a file naming another repository keeps publishing there.

    With *allow_missing*, a missing file yields the defaults plus the
    environment instead of an error. *require_publish* / *require_api* set to
    False disable the matching section before validation, so a run that skips
    publishing or submission does not need those credentials.

    Raises:
        ConfigError: if the file is missing, malformed, or required fields
                     are absent.
    """
    path = Path(config_path)

    if path.exists():
        raw = _read_yaml(path, config_path)
    elif allow_missing:
        raw = {}
    else:
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m quality_report init` to generate a template."
        )

    tools   = _section(raw, "tools")
    scoring = _section(raw, "scoring")
    publish = _section(raw, "publish")
    api     = _section(raw, "api")

    defaults = ToolsConfig()
    tools_config = ToolsConfig(
        java=_str(tools.get("java"), defaults.java),
        javac=_str(tools.get("javac"), defaults.javac),
        checkstyle_jar=_str(tools.get("checkstyle_jar"), defaults.checkstyle_jar),
        checkstyle_config=_str(tools.get("checkstyle_config"), defaults.checkstyle_config),
        spotbugs=_str(tools.get("spotbugs"), defaults.spotbugs),
    )

    publish_config = PublishConfig(
        enabled=_bool(publish.get("enabled"), "publish.enabled", True) and require_publish,
        docs_dir=_str(publish.get("docs_dir"), "docs"),
        username=os.environ.get("QUALITY_USERNAME") or _str(publish.get("username"), "default-user"),
        repository=_str(publish.get("repository")) or os.environ.get("GITHUB_REPOSITORY", ""),
        branch=_str(publish.get("branch"), "main"),
        token=os.environ.get("GH_PAT") or _str(publish.get("token")),
    )

    api_config = ApiConfig(
        enabled=_bool(api.get("enabled"), "api.enabled", True) and require_api,
        url=os.environ.get("QUALITY_API_URL") or _str(api.get("url")),
        user_id=os.environ.get("QUALITY_API_USER_ID") or _str(api.get("user_id")),
        client_public=os.environ.get("QUALITY_API_CLIENT_PUBLIC") or _str(api.get("client_public")),
        client_secret=os.environ.get("QUALITY_API_CLIENT_SECRET") or _str(api.get("client_secret")),
        project_id=os.environ.get("QUALITY_PROJECT_ID") or _str(api.get("project_id")),
    )

    config = Config(
        source_root=_str(raw.get("source_root"), "."),
        work_dir=_str(raw.get("work_dir"), "."),
        clamp=_bool(scoring.get("clamp"), "scoring.clamp", False),
        tools=tools_config,
        publish=publish_config,
        api=api_config,
    )
    _validate(config)
    return config


def _read_yaml(path: Path, config_path: str) -> dict:
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")
    return raw


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping.")
    return value


def _str(value, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip() or default


def _bool(value, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"'{name}' must be true or false, got {value!r}.")
    return value


def _validate(config: Config) -> None:
    """Raise ConfigError if required fields are missing."""
    errors: list[str] = []

    if config.publish.enabled:
        if not config.publish.repository:
            errors.append("  - 'publish.repository' is missing (expected 'owner/name')")
        if not config.publish.token:
            errors.append(
                "  - 'publish.token' is missing (or set the GH_PAT environment variable)"
            )

    if config.api.enabled:
        if not config.api.url:
            errors.append(
                "  - 'api.url' is missing (or set the QUALITY_API_URL environment variable)"
            )
        if not config.api.client_public:
            errors.append("  - 'api.client_public' is missing")
        if not config.api.client_secret:
            errors.append(
                "  - 'api.client_secret' is missing "
                "(or set the QUALITY_API_CLIENT_SECRET environment variable)"
            )
        if not config.api.project_id:
            errors.append("  - 'api.project_id' is missing")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
source_root: "."
work_dir: "."

tools:
  java: "java"
  javac: "javac"
  checkstyle_jar: "checkstyle.jar"
  checkstyle_config: "checkstyle-config.xml"
  spotbugs: "./spotbugs-4.5.0/bin/spotbugs"

scoring:
  clamp: false                    # true bounds quality_score to [0, 10]

publish:
  enabled: true
  docs_dir: "docs"
  username: "default-user"        # report lands in docs/<username>/
  repository: "owner/repo"
  branch: "main"
  token: ""                       # prefer the GH_PAT environment variable

api:
  enabled: true
  url: "https://scoring.example.com/api/setQuality"
  user_id: "my-user"
  client_public: "xxxxxxxxxxxx"
  client_secret: ""               # prefer QUALITY_API_CLIENT_SECRET
  project_id: "JAVA0000"
"""


def generate_template(output_path: str = "quality-config.yaml") -> None:
    """Write a template quality-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
