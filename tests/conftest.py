import os
import sys
from pathlib import Path
import pytest
from helpers import mark_by_dir


@pytest.fixture(autouse=True)
def _ensure_src_on_syspath():
    # Add project src/ to sys.path for src-layout imports
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))
    yield


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    # Keep developer VULNBENCH_* settings out of tests
    for key in list(os.environ):
        if key.startswith("VULNBENCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("VULNBENCH_DIRECTORIES__HOME", str(tmp_path / "home"))


TESTS = Path(__file__).parent

def pytest_collection_modifyitems(config, items):
    # Mark tests by directory structure
    mark_by_dir(items, TESTS / "vulnbench" / "core", pytest.mark.unit)
    mark_by_dir(items, TESTS / "vulnbench" / "infra", pytest.mark.integration)
    mark_by_dir(items, TESTS / "vulnbench" / "app", pytest.mark.e2e)
