import sys
from pathlib import Path

import pytest

# Ensure the mova_agent package is importable for tests
REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mova_agent.app.config import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for name in (
        "MOVA_ALLOWLIST_DENY_BY_DEFAULT",
        "MOVA_DEFAULT_TIMEOUT_MS",
        "MOVA_ARTIFACTS_ROOT",
        "MOVA_EVIDENCE_NAMESPACE",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
