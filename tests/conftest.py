from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def run_from_project_root(monkeypatch):
    # program files are opened relative to the project root
    monkeypatch.chdir(Path(__file__).resolve().parent.parent)
