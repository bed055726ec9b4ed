"""Tests for quality_report/config.py"""

import textwrap
from pathlib import Path

import pytest

from quality_report.config import (
    Config,
    ConfigError,
    generate_template,
    load,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "quality-config.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    source_root: "src"
    work_dir: "build/quality"
    tools:
      spotbugs: "/opt/spotbugs/bin/spotbugs"
    scoring:
      clamp: true
    publish:
      username: "alice"
      repository: "acme/java-app"
      token: "ghp_abc123"
    api:
      url: "https://scoring.example.com/api/setQuality"
      user_id: "acme"
      client_public: "pub123"
      client_secret: "sec456"
      project_id: "JAVA1080"
    """

OFFLINE_YAML = """\
    publish:
      enabled: false
    api:
      enabled: false
    """


# ---------------------------------------------------------------------------
# load() - happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path):
    config = load(str(write_config(tmp_path, VALID_YAML)))
    assert config.source_root == "src"
    assert config.work_dir == "build/quality"
    assert config.clamp is True
    assert config.tools.spotbugs == "/opt/spotbugs/bin/spotbugs"
    assert config.publish.username == "alice"
    assert config.publish.repository == "acme/java-app"
    assert config.api.project_id == "JAVA1080"


def test_load_applies_defaults(tmp_path):
    config = load(str(write_config(tmp_path, OFFLINE_YAML)))
    assert config.source_root == "."
    assert config.clamp is False
    assert config.tools.java == "java"
    assert config.tools.checkstyle_jar == "checkstyle.jar"
    assert config.publish.docs_dir == "docs"
    assert config.publish.username == "default-user"
    assert config.publish.branch == "main"


# ---------------------------------------------------------------------------
# load() - missing or malformed file
# ---------------------------------------------------------------------------

def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"))


def test_load_missing_file_allowed_uses_defaults_and_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_REPOSITORY", "acme/java-app")
    monkeypatch.setenv("GH_PAT", "ghp_env")
    monkeypatch.setenv("QUALITY_API_URL", "https://scoring.example.com/api/setQuality")
    monkeypatch.setenv("QUALITY_API_USER_ID", "acme")
    monkeypatch.setenv("QUALITY_API_CLIENT_PUBLIC", "pub_env")
    monkeypatch.setenv("QUALITY_API_CLIENT_SECRET", "sec_env")
    monkeypatch.setenv("QUALITY_PROJECT_ID", "JAVA1080")

    config = load(str(tmp_path / "no-such-file.yaml"), allow_missing=True)

    assert config.source_root == "."
    assert config.publish.repository == "acme/java-app"
    assert config.publish.token == "ghp_env"
    assert config.api.user_id == "acme"
    assert config.api.client_public == "pub_env"
    assert config.api.project_id == "JAVA1080"


def test_load_missing_file_allowed_still_validates(tmp_path):
    with pytest.raises(ConfigError, match="publish.repository"):
        load(str(tmp_path / "no-such-file.yaml"), allow_missing=True)


def test_load_empty_file_uses_defaults(tmp_path):
    p = write_config(tmp_path, "")
    config = load(str(p), require_publish=False, require_api=False)
    assert config.tools.javac == "javac"


def test_load_top_level_not_a_mapping(tmp_path):
    p = write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        load(str(p))


def test_load_section_not_a_mapping(tmp_path):
    p = write_config(tmp_path, "tools: 12\n")
    with pytest.raises(ConfigError, match="'tools' must be a mapping"):
        load(str(p))


def test_load_invalid_yaml(tmp_path):
    p = write_config(tmp_path, "publish: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(str(p))


# ---------------------------------------------------------------------------
# load() - missing required fields
# ---------------------------------------------------------------------------

def test_load_missing_publish_token(tmp_path):
    p = write_config(tmp_path, """\
        publish:
          repository: "acme/java-app"
        api:
          enabled: false
        """)
    with pytest.raises(ConfigError, match="publish.token"):
        load(str(p))


def test_load_missing_repository(tmp_path):
    p = write_config(tmp_path, """\
        publish:
          token: "ghp_abc"
        api:
          enabled: false
        """)
    with pytest.raises(ConfigError, match="publish.repository"):
        load(str(p))


def test_load_missing_api_fields_reported_together(tmp_path):
    p = write_config(tmp_path, """\
        publish:
          enabled: false
        api:
          user_id: "acme"
        """)
    with pytest.raises(ConfigError) as excinfo:
        load(str(p))
    message = str(excinfo.value)
    assert "api.url" in message
    assert "api.client_public" in message
    assert "api.client_secret" in message
    assert "api.project_id" in message


@pytest.mark.parametrize("content, name", [
    ('publish:\n  enabled: "false"\napi:\n  enabled: false\n', "publish.enabled"),
    ('publish:\n  enabled: false\napi:\n  enabled: "no"\n', "api.enabled"),
    ('scoring:\n  clamp: 1\npublish:\n  enabled: false\napi:\n  enabled: false\n', "scoring.clamp"),
])
def test_load_non_boolean_flag_rejected(tmp_path, content, name):
    p = write_config(tmp_path, content)
    with pytest.raises(ConfigError, match=name):
        load(str(p))


# ---------------------------------------------------------------------------
# load() - environment variable overrides
# ---------------------------------------------------------------------------

def test_env_gh_pat_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("GH_PAT", "ghp_override")
    assert load(str(p)).publish.token == "ghp_override"


def test_env_username_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("QUALITY_USERNAME", "bob")
    assert load(str(p)).publish.username == "bob"


def test_env_vars_can_supply_missing_secrets(tmp_path, monkeypatch):
    """Secrets may live only in the environment."""
    p = write_config(tmp_path, """\
        publish:
          repository: "acme/java-app"
        api:
          client_public: "pub123"
          project_id: "JAVA1080"
        """)
    monkeypatch.setenv("GH_PAT", "ghp_from_env")
    monkeypatch.setenv("QUALITY_API_URL", "https://scoring.example.com/api/setQuality")
    monkeypatch.setenv("QUALITY_API_CLIENT_SECRET", "sec_from_env")
    config = load(str(p))
    assert config.publish.token == "ghp_from_env"
    assert config.api.url == "https://scoring.example.com/api/setQuality"
    assert config.api.client_secret == "sec_from_env"


def test_github_repository_fills_empty_publish_repository(tmp_path, monkeypatch):
    p = write_config(tmp_path, """\
        publish:
          token: "ghp_abc"
        api:
          enabled: false
        """)
    monkeypatch.setenv("GITHUB_REPOSITORY", "acme/from-actions")
    assert load(str(p)).publish.repository == "acme/from-actions"


def test_github_repository_does_not_replace_configured_repository(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("GITHUB_REPOSITORY", "acme/from-actions")
    assert load(str(p)).publish.repository == "acme/java-app"


# ---------------------------------------------------------------------------
# load() - sections disabled by the caller
# ---------------------------------------------------------------------------

def test_require_flags_disable_sections_before_validation(tmp_path):
    p = write_config(tmp_path, "publish:\n  enabled: true\napi:\n  enabled: true\n")
    config = load(str(p), require_publish=False, require_api=False)
    assert config.publish.enabled is False
    assert config.api.enabled is False


def test_require_flags_cannot_enable_disabled_section(tmp_path):
    config = load(str(write_config(tmp_path, OFFLINE_YAML)))
    assert config.publish.enabled is False
    assert config.api.enabled is False


# ---------------------------------------------------------------------------
# Config defaults
# ---------------------------------------------------------------------------

def test_config_dataclass_defaults():
    config = Config()
    assert config.work_dir == "."
    assert config.publish.enabled is True
    assert config.api.enabled is True


# ---------------------------------------------------------------------------
# generate_template()
# ---------------------------------------------------------------------------

def test_generate_template_creates_file(tmp_path):
    out = tmp_path / "quality-config.yaml"
    generate_template(str(out))
    assert out.exists()
    content = out.read_text()
    assert "publish:" in content
    assert "api:" in content
    assert "tools:" in content


def test_generate_template_is_loadable_with_secrets_from_env(tmp_path, monkeypatch):
    out = tmp_path / "quality-config.yaml"
    generate_template(str(out))
    monkeypatch.setenv("GH_PAT", "ghp_x")
    monkeypatch.setenv("QUALITY_API_CLIENT_SECRET", "sec_x")
    config = load(str(out))
    assert config.publish.repository == "owner/repo"


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "quality-config.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))
