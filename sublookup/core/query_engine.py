"""Lookup queries over the repository's cached :class:`AppData`.

Every operation fetches the cached data from the repository on each call, so
the first query of the process pays for the load and later ones are pure
in-memory lookups.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Optional, Set

from sublookup.core.errors import (
    INVALID_REQUEST,
    NO_MATCH,
    TERM_TOO_SHORT,
    LookupFailure,
)
from sublookup.core.expiration import (
    NO_DATE,
    compute_expiration,
    is_past_due,
)
from sublookup.core.manifest import base_name_of
from sublookup.core.models import (
    AUTHORIZATION_EXPIRED,
    NOT_PAID,
    NOT_REGISTERED,
    VALID,
    AppData,
    AuditAccount,
    ExpiredAccount,
    FuzzyResult,
    OrgConfig,
    ProxyAccount,
    Row,
    SearchResult,
    row_value,
)
from sublookup.core.repository import DataRepository

logger = logging.getLogger(__name__)

MIN_FUZZY_LENGTH = 3
DEFAULT_ADMIN_ROLE = "admin"
DEFAULT_NOT_PAID_THRESHOLD = 20250724
DEFAULT_AUDIT_EXCLUDED_BASES = ("blueskyy", "parvis")

ORG_JOINER = " & "

MSG_TERM_TOO_SHORT = (
    "Fuzzy search requires at least 3 characters. / 模糊搜索至少需要3个字符。"
)
MSG_POTENTIAL_MATCHES = (
    "Potential matches found. Please enter a more specific or full email "
    "address for an exact search. / 找到潜在匹配项。请输入更完整或具体的邮箱地址以进行精确搜索。"
)
MSG_NO_MATCHES = 'No potential matches found for "{term}". / 未找到 "{term}" 的可能匹配项。'
MSG_MISSING_EMAIL = "Email is required. / 需要提供邮箱地址。"


def _device_limit(match_count: int) -> int:
    if match_count == 1:
        return 2
    if match_count >= 2:
        return 4
    return 0


def _parse_rat(value: str) -> int:
    """Leading digits of a raw approval date, ``0`` when there are none."""

    digits = ""
    for char in value:
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else 0


class QueryEngine:
    def __init__(
        self,
        repository: DataRepository,
        *,
        admin_role: str = DEFAULT_ADMIN_ROLE,
        not_paid_threshold: int = DEFAULT_NOT_PAID_THRESHOLD,
        audit_excluded_bases: Iterable[str] = DEFAULT_AUDIT_EXCLUDED_BASES,
    ) -> None:
        self.repository = repository
        self.admin_role = admin_role
        self.not_paid_threshold = not_paid_threshold
        self.audit_excluded_bases = frozenset(audit_excluded_bases)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def is_admin(self, role: Optional[str]) -> bool:
        return not role or role.lower() == self.admin_role.lower()

    @staticmethod
    def _hint_config(data: AppData, hint: str) -> Optional[OrgConfig]:
        if not hint:
            return None
        return data.conf_data.get(base_name_of(hint))

    @staticmethod
    def _expiration_of(row: Row) -> str:
        return compute_expiration(row_value(row, "rat"), row_value(row, "pov"))

    # ------------------------------------------------------------------
    # exact / fuzzy search
    # ------------------------------------------------------------------
    def exact_search(self, email: str) -> SearchResult:
        return self._exact_search(self.repository.get(), email)

    def _exact_search(self, data: AppData, email: str) -> SearchResult:
        key = (email or "").strip().lower()
        result = SearchResult(email=key)

        matched = [
            data.conf_data[source.base_name]
            for source in data.data_sources
            if key in source and source.base_name in data.conf_data
        ]
        if matched:
            result.status = VALID
            result.organization = ORG_JOINER.join(c.org_name for c in matched)
            result.subscription_details = ORG_JOINER.join(
                c.subscription_details for c in matched
            )
            result.device_limit = _device_limit(len(matched))
            result.expiration_date = "Rolling"

        extra = data.additional_map.get(key)
        if extra is not None:
            approval = row_value(extra, "rat")
            expiration = self._expiration_of(extra)
            hint = row_value(extra, "Org")
            hint_conf = self._hint_config(data, hint)

            # Rolling approvals count as valid here, only "-" does not.
            if not result.is_valid and expiration != NO_DATE and hint_conf:
                result.status = VALID
                result.device_limit = 2
                result.organization = hint_conf.org_name
                result.subscription_details = hint_conf.subscription_details

            # The hint replaces the organization even after a multi-org join.
            if hint:
                result.organization = hint_conf.org_name if hint_conf else hint

            result.approver = row_value(extra, "Approver") or "-"
            result.approval_date = approval or "-"
            if expiration != NO_DATE:
                result.expiration_date = expiration

        if not result.is_valid:
            return SearchResult(email=key)
        return result

    def fuzzy_search(self, term: Optional[str]) -> FuzzyResult:
        if term is None:
            raise LookupFailure(INVALID_REQUEST, MSG_MISSING_EMAIL)
        needle = term.strip().lower()
        if len(needle) < MIN_FUZZY_LENGTH:
            raise LookupFailure(TERM_TOO_SHORT, MSG_TERM_TOO_SHORT)

        data = self.repository.get()
        indexes: List[Iterable[str]] = [s.index.keys() for s in data.data_sources]
        indexes.append(data.additional_map.keys())
        for keys in indexes:
            if any(needle in key for key in keys):
                return FuzzyResult(message=MSG_POTENTIAL_MATCHES)
        raise LookupFailure(NO_MATCH, MSG_NO_MATCHES.format(term=needle))

    # ------------------------------------------------------------------
    # aggregates
    # ------------------------------------------------------------------
    def user_count(self) -> int:
        data = self.repository.get()
        conf = self.repository.user_count_config()
        rate = (conf.udgr or 100) / 100
        additional = conf.naud or 0
        count = math.floor(data.total_rows * rate + additional)
        logger.debug(
            "user_count rows=%d udgr=%d naud=%d count=%d",
            data.total_rows,
            conf.udgr,
            conf.naud,
            count,
        )
        return count

    def expired_accounts(self, approver: Optional[str] = None) -> List[ExpiredAccount]:
        data = self.repository.get()
        today = self.repository.today()
        accounts: List[ExpiredAccount] = []
        for email, row in data.additional_map.items():
            expiration = self._expiration_of(row)
            if not is_past_due(expiration, today):
                continue
            if not data.in_main_source(email):
                continue
            accounts.append(
                ExpiredAccount(
                    email=email,
                    organization=row_value(row, "Org") or "Unknown",
                    approver=row_value(row, "Approver") or "-",
                    expiration_date=expiration,
                )
            )

        if not self.is_admin(approver):
            wanted = approver.lower()
            accounts = [a for a in accounts if a.approver.lower() == wanted]
        return accounts

    def quick_audit(self, approver: Optional[str] = None) -> List[AuditAccount]:
        accounts = self._quick_audit(self.repository.get())
        if not self.is_admin(approver):
            wanted = approver.lower()
            accounts = [a for a in accounts if a.approver.lower() == wanted]
        return accounts

    def _quick_audit(self, data: AppData) -> List[AuditAccount]:
        accounts: List[AuditAccount] = []
        flagged: Set[str] = set()

        for email, row in data.additional_map.items():
            rat = row_value(row, "rat")
            rat_num = _parse_rat(rat)
            if not rat_num or rat_num < self.not_paid_threshold:
                continue
            if not data.in_main_source(email):
                continue
            if email in data.payment_map:
                continue
            accounts.append(
                AuditAccount(
                    email=email,
                    rat=rat or "-",
                    approver=row_value(row, "Approver") or "-",
                    pov=row_value(row, "pov") or "-",
                    reason=NOT_PAID,
                )
            )
            flagged.add(email)

        for source in data.data_sources:
            if source.base_name in self.audit_excluded_bases:
                continue
            for email in source.index:
                if email in flagged or email in data.additional_map:
                    continue
                accounts.append(
                    AuditAccount(
                        email=email,
                        rat="-",
                        approver="-",
                        pov="-",
                        reason=NOT_REGISTERED,
                    )
                )
                flagged.add(email)

        logger.info(
            "quick_audit_done flagged=%d not_paid=%d",
            len(accounts),
            sum(1 for a in accounts if a.reason == NOT_PAID),
        )
        return accounts

    # ------------------------------------------------------------------
    # proxy dashboard
    # ------------------------------------------------------------------
    def proxy_dashboard(self, role: str) -> List[ProxyAccount]:
        data = self.repository.get()
        today = self.repository.today()

        rows = list(data.additional_map.values())
        if not self.is_admin(role):
            wanted = role.lower()
            rows = [r for r in rows if row_value(r, "Approver").lower() == wanted]

        reasons: Dict[str, str] = {a.email: a.reason for a in self._quick_audit(data)}

        dashboard: List[ProxyAccount] = []
        for row in rows:
            email = row_value(row, "Email").lower()
            if not email:
                continue
            result = self._exact_search(data, email)
            if not result.is_valid:
                continue

            tag = ""
            expiration = self._expiration_of(row)
            if is_past_due(expiration, today) and data.in_main_source(email):
                tag = AUTHORIZATION_EXPIRED
            if not tag:
                tag = reasons.get(email, "")
            dashboard.append(ProxyAccount(result=result, tag=tag))
        return dashboard


__all__ = [
    "QueryEngine",
    "MIN_FUZZY_LENGTH",
    "DEFAULT_ADMIN_ROLE",
    "DEFAULT_NOT_PAID_THRESHOLD",
    "DEFAULT_AUDIT_EXCLUDED_BASES",
]
