"""Readers for the small ``.conf`` control files next to the CSV data."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Dict, Optional

from sublookup.core.errors import CONFIG_MISSING, ConfigurationError
from sublookup.core.models import OrgConfig, UserCountConfig

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_org_config(text: str) -> Optional[OrgConfig]:
    """Parse ``"<org name>,<subscription details>"``.

    Details keep any further commas. Returns ``None`` when either part is
    empty.
    """

    org_name, sep, details = text.partition(",")
    org_name = org_name.strip()
    details = details.strip()
    if not sep or not org_name or not details:
        return None
    return OrgConfig(org_name=org_name, subscription_details=details)


def _parse_int(value: str) -> Optional[int]:
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def parse_user_count_config(text: str) -> UserCountConfig:
    udgr = UserCountConfig.udgr
    naud = UserCountConfig.naud
    for line in text.split("\n"):
        parts = [p.strip() for p in line.split("=")]
        if len(parts) < 2:
            continue
        key, value = parts[0], parts[1]
        if key == "udgr":
            parsed = _parse_int(value)
            if parsed is not None:
                udgr = parsed
        elif key == "naud":
            parsed = _parse_int(value)
            if parsed is not None:
                naud = parsed
    return UserCountConfig(udgr=udgr, naud=naud)


def parse_pin_map(text: str) -> Dict[str, str]:
    """Build a pin -> role lookup from ``role=pin`` lines."""

    pins: Dict[str, str] = {}
    for line in text.split("\n"):
        if not line:
            continue
        role, _, pin = line.partition("=")
        role = role.strip()
        pin = pin.strip()
        if role and pin:
            pins[pin] = role
    return pins


def read_api_secret(path: Path, reader: Optional[Callable[[Path], str]] = None) -> str:
    try:
        if reader is None:
            secret = Path(path).read_text(encoding="utf-8").strip()
        else:
            secret = reader(path).strip()
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("api_secret_unreadable path=%s error=%s", path, exc)
        raise ConfigurationError(CONFIG_MISSING, "API key is not configured.") from exc
    if not secret:
        logger.error("api_secret_empty path=%s", path)
        raise ConfigurationError(CONFIG_MISSING, "API key is not configured.")
    return secret


__all__ = [
    "parse_org_config",
    "parse_user_count_config",
    "parse_pin_map",
    "read_api_secret",
]
