"""Plain data records shared by the repository and the query engine.

The ``to_dict`` helpers produce the camelCase payloads returned by the HTTP
layer so route handlers never reshape records themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

Row = Dict[str, str]

VALID = "Valid"
INVALID = "Invalid"
NOT_PAID = "Not Paid"
NOT_REGISTERED = "Not Registered"
AUTHORIZATION_EXPIRED = "Authorization Expired"


@dataclass(frozen=True)
class OrgConfig:
    org_name: str
    subscription_details: str


@dataclass(frozen=True)
class DataSource:
    """One organization roster, indexed by lowercased email."""

    base_name: str
    index: Mapping[str, Row]
    row_count: int = 0

    def __contains__(self, email: object) -> bool:
        return email in self.index

    def __len__(self) -> int:
        return len(self.index)


@dataclass(frozen=True)
class UserCountConfig:
    udgr: int = 100
    naud: int = 0


def row_value(row: Row, column: str) -> str:
    """Trimmed value of ``column``, matching the header case-insensitively."""

    value = row.get(column)
    if value is None:
        lowered = column.lower()
        for key, candidate in row.items():
            if key.lower() == lowered:
                value = candidate
                break
    return (value or "").strip()


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class AppData:
    """Aggregate of every loaded file; read-only once built."""

    data_sources: Tuple[DataSource, ...] = ()
    additional_map: Mapping[str, Row] = field(default_factory=dict)
    payment_map: Mapping[str, Row] = field(default_factory=dict)
    conf_data: Mapping[str, OrgConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data_sources", tuple(self.data_sources))
        object.__setattr__(self, "additional_map", _freeze(self.additional_map))
        object.__setattr__(self, "payment_map", _freeze(self.payment_map))
        object.__setattr__(self, "conf_data", _freeze(self.conf_data))

    def in_main_source(self, email: str) -> bool:
        return any(email in source for source in self.data_sources)

    @property
    def total_rows(self) -> int:
        return sum(source.row_count for source in self.data_sources)


@dataclass
class SearchResult:
    email: str
    status: str = INVALID
    organization: str = "-"
    subscription_details: str = "-"
    device_limit: int = 0
    approver: str = "-"
    approval_date: str = "-"
    expiration_date: str = "-"

    @property
    def is_valid(self) -> bool:
        return self.status == VALID

    def to_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "status": self.status,
            "organization": self.organization,
            "subscriptionDetails": self.subscription_details,
            "deviceLimit": self.device_limit,
            "approver": self.approver,
            "approvalDate": self.approval_date,
            "expirationDate": self.expiration_date,
        }


@dataclass(frozen=True)
class FuzzyResult:
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


@dataclass(frozen=True)
class ExpiredAccount:
    email: str
    organization: str
    approver: str
    expiration_date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "organization": self.organization,
            "approver": self.approver,
            "expirationDate": self.expiration_date,
        }


@dataclass(frozen=True)
class AuditAccount:
    email: str
    rat: str
    approver: str
    pov: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "rat": self.rat,
            "approver": self.approver,
            "pov": self.pov,
            "reason": self.reason,
        }


@dataclass
class ProxyAccount:
    result: SearchResult
    tag: str = ""

    def to_dict(self) -> Dict[str, Any]:
        payload = self.result.to_dict()
        payload["tag"] = self.tag
        return payload


__all__ = [
    "Row",
    "row_value",
    "VALID",
    "INVALID",
    "NOT_PAID",
    "NOT_REGISTERED",
    "AUTHORIZATION_EXPIRED",
    "OrgConfig",
    "DataSource",
    "UserCountConfig",
    "AppData",
    "SearchResult",
    "FuzzyResult",
    "ExpiredAccount",
    "AuditAccount",
    "ProxyAccount",
]
