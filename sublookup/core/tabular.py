"""Tolerant CSV loader producing header-keyed rows.

Malformed input never raises: bad files yield ``[]`` and bad lines are
skipped, each with a warning naming the file label.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from sublookup.core.csv_lines import parse_csv_line
from sublookup.core.models import Row

logger = logging.getLogger(__name__)

BOM = "\ufeff"
ORG_HEADER = "Org"

MAIN_HEADERS = ("Email", "Product Configurations")
ADDITIONAL_HEADERS = ("Email", "Approver", "rat", "pov", ORG_HEADER)
PAYMENT_HEADERS = ("Email", "PaymentDate", "Approver", "pov")

_LINE_SPLIT = re.compile(r"\r?\n")
_BLANK_LINE = re.compile(r"^\s*,*\s*$")


def _missing_headers(headers: Iterable[str], required: Iterable[str]) -> List[str]:
    present = {h.lower() for h in headers}
    return [h for h in required if h.lower() not in present]


def _find_email_header(headers: List[str]) -> Optional[str]:
    for header in headers:
        if header.lower() == "email":
            return header
    return None


def load_rows(
    text: str,
    label: str,
    required_headers: Iterable[str],
    *,
    org_optional: bool = False,
) -> List[Row]:
    """Parse ``text`` into rows keyed by header name.

    ``org_optional`` lets an "additional" file omit the ``Org`` hint column
    while still enforcing every other required header.
    """

    if text.startswith(BOM):
        text = text[1:]
    lines = _LINE_SPLIT.split(text.strip())
    if not lines or not lines[0].strip():
        return []

    headers = [h for h in parse_csv_line(lines[0]) if h]
    if not headers:
        logger.warning("csv_skip file=%s reason=empty_header", label)
        return []

    missing = _missing_headers(headers, required_headers)
    org_only = org_optional and all(h.lower() == ORG_HEADER.lower() for h in missing)
    if missing and not org_only:
        logger.warning(
            "csv_skip file=%s reason=missing_headers headers=%s",
            label,
            ", ".join(missing),
        )
        return []

    email_header = _find_email_header(headers)
    if email_header is None:
        logger.warning("csv_skip file=%s reason=no_email_column", label)
        return []
    email_index = headers.index(email_header)

    rows: List[Row] = []
    for lineno, line in enumerate(lines[1:], start=2):
        if not line or _BLANK_LINE.match(line):
            continue
        values = parse_csv_line(line)
        if len(values) < len(headers):
            logger.warning(
                "csv_line_skip file=%s line=%d columns=%d expected=%d",
                label,
                lineno,
                len(values),
                len(headers),
            )
            continue
        if not values[email_index]:
            continue

        row = {header: values[idx].strip() for idx, header in enumerate(headers)}
        if any(row.values()):
            rows.append(row)
    return rows


__all__ = [
    "load_rows",
    "MAIN_HEADERS",
    "ADDITIONAL_HEADERS",
    "PAYMENT_HEADERS",
    "ORG_HEADER",
]
