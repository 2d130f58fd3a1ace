"""Endpoints used by the lookup web UI."""

from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify, request

from sublookup.api.auth import require_session_role
from sublookup.api.schemas import search_request_validator, validated_json
from sublookup.api.services import get_engine
from sublookup.core.errors import INVALID_REQUEST, LookupFailure

logger = logging.getLogger(__name__)

search_bp = Blueprint("search", __name__, url_prefix="/api")

MSG_BAD_SEARCH = "Email is required. / 需要提供邮箱地址。"


@search_bp.post("/search")
def search():
    """Exact lookup by default; ``type=fuzzy`` only reports whether matches exist."""

    data = validated_json(search_request_validator, MSG_BAD_SEARCH)
    engine = get_engine()
    if data.get("type") == "fuzzy":
        return jsonify(engine.fuzzy_search(data["email"]).to_dict())

    email = data["email"].strip()
    if not email:
        raise LookupFailure(INVALID_REQUEST, MSG_BAD_SEARCH)
    return jsonify(engine.exact_search(email).to_dict())


@search_bp.get("/search")
def search_reports():
    report = request.args.get("type")
    if report == "count":
        return jsonify(
            {"message": "This count method is deprecated. Please use the /api/count endpoint."}
        )
    if report in ("expired", "qa", "proxy"):
        return _role_report(report)
    return jsonify(
        {"message": "API is running. Use POST for searching or GET /api/count."}
    )


@require_session_role
def _role_report(report: str):
    engine = get_engine()
    role = g.role
    logger.info("role_report type=%s role=%s", report, role)
    if report == "expired":
        accounts = engine.expired_accounts(role)
        return jsonify({"expiredAccounts": [a.to_dict() for a in accounts], "role": role})
    if report == "qa":
        accounts = engine.quick_audit(role)
        return jsonify({"qaAccounts": [a.to_dict() for a in accounts], "role": role})
    rows = engine.proxy_dashboard(role)
    return jsonify({"proxyData": [r.to_dict() for r in rows], "role": role})


@search_bp.get("/count")
def count():
    return jsonify({"count": get_engine().user_count()})
