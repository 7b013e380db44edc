import sys
from pathlib import Path

import pytest

# Ensure repository root is on the import path for local package imports during tests.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_FOLDING_ENV_VARS = (
    "FOLDING_FIELD",
    "FOLDING_ENABLE_EXPAND",
    "FOLDING_EXPAND_EXPRESSION",
    "FOLDING_MAXIMUM_EXPANDED_RESULTS",
    "FOLDING_RANGE_FIELD",
    "FOLDING_REARRANGE",
    "FOLDING_ENDPOINT_URL",
    "FOLDING_ACCESS_TOKEN",
    "FOLDING_REQUEST_TIMEOUT_S",
)


@pytest.fixture(autouse=True)
def isolated_folding_env(monkeypatch):
    """Keep developer FOLDING_* variables from leaking into configuration tests."""

    for name in _FOLDING_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
