"""PIN login and the signed session cookie carrying the approver role."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, session

from sublookup.api.auth import SESSION_ROLE_KEY, current_role
from sublookup.api.schemas import login_request_validator, validated_json
from sublookup.api.services import get_repository

logger = logging.getLogger(__name__)

session_bp = Blueprint("session", __name__, url_prefix="/api")


@session_bp.post("/login")
def login():
    data = validated_json(login_request_validator, "PIN is required.")
    pin = str(data["pin"]).strip()
    if not pin:
        return jsonify({"error": "PIN is required."}), 400

    role = get_repository().pin_map().get(pin)
    if not role:
        logger.info("login_rejected")
        return jsonify({"error": "Incorrect PIN."}), 401

    session.clear()
    session.permanent = True
    session[SESSION_ROLE_KEY] = role
    logger.info("login_ok role=%s", role)
    return jsonify({"success": True, "role": role})


@session_bp.post("/logout")
def logout():
    session.clear()
    return jsonify({"success": True, "message": "Logged out successfully"})


@session_bp.get("/session")
def current_session():
    role = current_role()
    if role is None:
        return jsonify({"user": None}), 401
    return jsonify({"user": {"role": role}})
