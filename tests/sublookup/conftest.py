from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from sublookup.core.manifest import discover_manifest
from sublookup.core.query_engine import QueryEngine
from sublookup.core.repository import DataRepository

TODAY = date(2025, 2, 1)


def write_files(root: Path, files: dict[str, str]) -> Path:
    for name, text in files.items():
        (root / name).write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def make_repository(tmp_path):
    """Factory building a repository over ``files`` written to ``tmp_path``."""

    def _factory(files: dict[str, str], **kwargs) -> DataRepository:
        write_files(tmp_path, files)
        return DataRepository(discover_manifest(tmp_path), **kwargs)

    return _factory


@pytest.fixture
def make_engine(make_repository):
    def _factory(files: dict[str, str], *, today: date = TODAY, **engine_kwargs):
        repository = make_repository(files, clock=lambda: today)
        return QueryEngine(repository, **engine_kwargs)

    return _factory


@pytest.fixture
def scenario_files():
    return {
        "alpha.conf": "Alpha School,All Apps plan",
        "beta.conf": "Beta College,Photography plan, 20GB",
        "alpha.csv": "Email,Product Configurations\nbob@x.com,All Apps\nann@x.com,All Apps\n",
        "beta_2024.csv": "Email,Product Configurations\nann@x.com,Photo\n",
        "additional.csv": (
            "Email,Approver,rat,pov,Org\n"
            "bob@x.com,carol,20240101,12m,alpha\n"
        ),
        "payment.csv": "Email,PaymentDate,Approver,pov\n",
    }
