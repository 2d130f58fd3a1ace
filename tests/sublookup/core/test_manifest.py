from pathlib import Path

import pytest

from sublookup.core.errors import MANIFEST_INVALID, ConfigurationError
from sublookup.core.manifest import (
    ADDITIONAL,
    API_SECRET,
    MAIN,
    ORG_CONFIG,
    PAYMENT,
    PIN_CONFIG,
    USER_CONFIG,
    base_name_of,
    discover_manifest,
    load_manifest,
    manifest_for,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("alpha.csv", "alpha"),
        ("alpha_2024-05.csv", "alpha"),
        ("beta2.conf", "beta2"),
        ("/data/gamma-part1.csv", "gamma"),
        ("_hidden.csv", ""),
        ("Alpha", "Alpha"),
    ],
)
def test_base_name_is_leading_alphanumeric_run(name, expected):
    assert base_name_of(name) == expected


def _touch(root: Path, *names: str) -> None:
    for name in names:
        (root / name).write_text("", encoding="utf-8")


def test_discovery_classifies_files(tmp_path):
    _touch(
        tmp_path,
        "alpha.conf",
        "alpha.csv",
        "alpha_part2.csv",
        "additional.csv",
        "payment_2025.csv",
        "user.conf",
        "userid.conf",
        "apipwd.conf",
        "notes.txt",
    )
    manifest = discover_manifest(tmp_path)

    roles = {f.path.name: f.role for f in manifest.files}
    assert roles == {
        "alpha.conf": ORG_CONFIG,
        "alpha.csv": MAIN,
        "alpha_part2.csv": MAIN,
        "additional.csv": ADDITIONAL,
        "payment_2025.csv": PAYMENT,
        "user.conf": USER_CONFIG,
        "userid.conf": PIN_CONFIG,
        "apipwd.conf": API_SECRET,
    }
    assert {f.base_name for f in manifest.by_role(MAIN)} == {"alpha"}


def test_discovery_of_missing_directory_is_empty(tmp_path):
    assert discover_manifest(tmp_path / "missing").files == ()


def test_yaml_manifest_resolves_relative_paths(tmp_path):
    (tmp_path / "manifest.yaml").write_text(
        "files:\n"
        "  - {file: rosters/alpha-export.csv, role: main, base_name: alpha}\n"
        "  - {file: alpha.conf, role: org_config}\n"
        "  - {file: approvals.csv, role: additional}\n",
        encoding="utf-8",
    )
    manifest = manifest_for(tmp_path)

    main = manifest.single(MAIN)
    assert main.path == tmp_path / "rosters" / "alpha-export.csv"
    assert main.base_name == "alpha"
    assert manifest.single(ORG_CONFIG).base_name == "alpha"
    assert manifest.single(ADDITIONAL).path.name == "approvals.csv"
    assert manifest.single(PAYMENT) is None


def test_yaml_manifest_rejects_unknown_role(tmp_path):
    path = tmp_path / "manifest.yaml"
    path.write_text("files:\n  - {file: a.csv, role: roster}\n", encoding="utf-8")
    with pytest.raises(ConfigurationError) as excinfo:
        load_manifest(path)
    assert excinfo.value.code == MANIFEST_INVALID
