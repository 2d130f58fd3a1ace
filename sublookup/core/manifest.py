"""Explicit inventory of the data files the repository loads.

A manifest lists every file with its role and, for rosters and org configs,
the base name that joins them. It can be written by hand as ``manifest.yaml``
or derived from the historic filename conventions of the data directory.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import yaml
from jsonschema import Draft7Validator

from sublookup.core.errors import MANIFEST_INVALID, ConfigurationError

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"
with open(SCHEMA_DIR / "manifest.json", encoding="utf-8") as _f:
    _validator = Draft7Validator(json.load(_f))

MANIFEST_FILENAME = "manifest.yaml"

MAIN = "main"
ADDITIONAL = "additional"
PAYMENT = "payment"
ORG_CONFIG = "org_config"
USER_CONFIG = "user_config"
PIN_CONFIG = "pin_config"
API_SECRET = "api_secret"

ADDITIONAL_BASENAME = "additional"
PAYMENT_BASENAME = "payment"
USER_CONF_FILENAME = "user.conf"
USERID_CONF_FILENAME = "userid.conf"
API_PWD_FILENAME = "apipwd.conf"

_RESERVED_CONF = {
    USER_CONF_FILENAME: USER_CONFIG,
    USERID_CONF_FILENAME: PIN_CONFIG,
    API_PWD_FILENAME: API_SECRET,
}
_BASE_NAME = re.compile(r"^([a-zA-Z0-9]+)")


def base_name_of(name: str) -> str:
    """Return the leading alphanumeric run of a file name's stem."""

    stem = Path(name.strip()).name
    for suffix in (".csv", ".conf"):
        if stem.endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    match = _BASE_NAME.match(stem)
    return match.group(1) if match else ""


@dataclass(frozen=True)
class DataFile:
    path: Path
    role: str
    base_name: str = ""


@dataclass(frozen=True)
class DataManifest:
    files: Tuple[DataFile, ...] = field(default_factory=tuple)

    def by_role(self, role: str) -> List[DataFile]:
        return [f for f in self.files if f.role == role]

    def single(self, role: str) -> Optional[DataFile]:
        matches = self.by_role(role)
        return matches[0] if matches else None


def _classify(path: Path) -> Optional[DataFile]:
    name = path.name
    if name.endswith(".conf"):
        reserved = _RESERVED_CONF.get(name)
        if reserved:
            return DataFile(path=path, role=reserved)
        return DataFile(path=path, role=ORG_CONFIG, base_name=base_name_of(name))
    if name.endswith(".csv"):
        base = base_name_of(name)
        if base == ADDITIONAL_BASENAME:
            return DataFile(path=path, role=ADDITIONAL, base_name=base)
        if base == PAYMENT_BASENAME:
            return DataFile(path=path, role=PAYMENT, base_name=base)
        return DataFile(path=path, role=MAIN, base_name=base)
    return None


def discover_manifest(directory: Path) -> DataManifest:
    """Build a manifest from the file names found in ``directory``."""

    directory = Path(directory)
    try:
        entries = sorted(p for p in directory.iterdir() if p.is_file())
    except OSError as exc:
        logger.error("data_dir_unreadable path=%s error=%s", directory, exc)
        return DataManifest()

    files = [f for f in (_classify(p) for p in entries) if f is not None]
    logger.info(
        "manifest_discovered path=%s files=%d", directory, len(files)
    )
    return DataManifest(files=tuple(files))


def _entries_to_files(entries: Iterable[dict], root: Path) -> Tuple[DataFile, ...]:
    files: List[DataFile] = []
    for entry in entries:
        path = Path(entry["file"])
        if not path.is_absolute():
            path = root / path
        base = entry.get("base_name")
        if base is None and entry["role"] in (MAIN, ORG_CONFIG, ADDITIONAL, PAYMENT):
            base = base_name_of(path.name)
        files.append(DataFile(path=path, role=entry["role"], base_name=base or ""))
    return tuple(files)


def load_manifest(path: Path) -> DataManifest:
    """Load a YAML manifest; file paths resolve against its directory."""

    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            MANIFEST_INVALID, f"Could not read manifest {path}: {exc}"
        ) from exc

    errors = sorted(_validator.iter_errors(raw), key=lambda e: list(e.path))
    if errors:
        detail = "; ".join(e.message for e in errors)
        raise ConfigurationError(MANIFEST_INVALID, f"Invalid manifest {path}: {detail}")

    return DataManifest(files=_entries_to_files(raw["files"], path.parent))


def manifest_for(directory: Path) -> DataManifest:
    directory = Path(directory)
    explicit = directory / MANIFEST_FILENAME
    if explicit.is_file():
        logger.info("manifest_explicit path=%s", explicit)
        return load_manifest(explicit)
    return discover_manifest(directory)


__all__ = [
    "MAIN",
    "ADDITIONAL",
    "PAYMENT",
    "ORG_CONFIG",
    "USER_CONFIG",
    "PIN_CONFIG",
    "API_SECRET",
    "DataFile",
    "DataManifest",
    "base_name_of",
    "discover_manifest",
    "load_manifest",
    "manifest_for",
]
