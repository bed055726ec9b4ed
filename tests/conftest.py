import pytest

_ENV_VARS = (
    "GH_PAT",
    "QUALITY_USERNAME",
    "QUALITY_API_URL",
    "QUALITY_API_USER_ID",
    "QUALITY_API_CLIENT_PUBLIC",
    "QUALITY_API_CLIENT_SECRET",
    "QUALITY_PROJECT_ID",
    "GITHUB_REPOSITORY",
    "GITHUB_ENV",
    "GITHUB_OUTPUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep CI-provided variables from leaking into config and env exports."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
