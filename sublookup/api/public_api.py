"""Bearer-token query API for scripts and other services."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from sublookup.api.auth import require_api_key
from sublookup.api.schemas import search_request_validator, validated_json
from sublookup.api.services import get_engine
from sublookup.core.errors import INVALID_REQUEST, INVALID_TYPE, LookupFailure

public_bp = Blueprint("public", __name__, url_prefix="/api/v1")

MSG_MISSING_FIELDS = "Missing email or type in request body."


@public_bp.post("/query")
@require_api_key
def query_search():
    data = validated_json(search_request_validator, MSG_MISSING_FIELDS)
    email = data["email"].strip()
    kind = data.get("type")
    if not email or not kind:
        raise LookupFailure(INVALID_REQUEST, MSG_MISSING_FIELDS)

    engine = get_engine()
    if kind == "fuzzy":
        return jsonify(engine.fuzzy_search(email).to_dict())
    if kind == "exact":
        return jsonify(engine.exact_search(email).to_dict())
    raise LookupFailure(INVALID_TYPE, f"Invalid search type: {kind}")


@public_bp.get("/query")
@require_api_key
def query_reports():
    engine = get_engine()
    kind = request.args.get("type")
    if kind == "count":
        return jsonify({"count": engine.user_count()})
    if kind == "expired":
        accounts = engine.expired_accounts()
        return jsonify({"expiredAccounts": [a.to_dict() for a in accounts]})
    return jsonify(
        {
            "message": "API is running. Use POST for searching or GET with "
            "'type=count' or 'type=expired'."
        }
    )
