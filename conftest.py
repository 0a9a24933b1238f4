# Root-level pytest configuration helpers applied to all tests
# - Ensure the repository root is importable so tests can `from input_processing...`,
#   `from core_router...` and `from api...` without an editable install
# - Keep log output out of the working tree during API tests

from pathlib import Path
import sys

import pytest


def _add_repo_root_to_sys_path() -> None:
    repo_root = Path(__file__).resolve().parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_add_repo_root_to_sys_path()


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    path = tmp_path / "logs"
    monkeypatch.setenv("VIBEGATE_LOG_DIR", str(path))
    return path
