# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pytest

from roster_import.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handlers bind sys.stdout at setup; rebuild per test so capsys sees output
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
store:
  backend: memory
  table: users
  key: email
field_mappings: []
persist_interest_fields: true
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv_text() -> str:
    return (
        "First Name,Last Name,Email,Phone\n"
        "Ada,Lovelace,ada@example.com,555-0100\n"
        "Grace,Hopper,GRACE@Example.com,555-0101\n"
        "Bad,Row,not-an-email,555-0102\n"
    )


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(name: str, text: str) -> Path:
        path = temp_workdir / "data" / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
