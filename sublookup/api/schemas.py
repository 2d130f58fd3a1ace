"""JSON-schema validation of request bodies."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from flask import request
from jsonschema import Draft7Validator, ValidationError

from sublookup.core.errors import INVALID_REQUEST, LookupFailure

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"


def _load(name: str) -> Draft7Validator:
    with open(SCHEMA_DIR / name, encoding="utf-8") as f:
        return Draft7Validator(json.load(f))


search_request_validator = _load("search_request.json")
login_request_validator = _load("login_request.json")


def validated_json(validator: Draft7Validator, message: str) -> Dict[str, Any]:
    """Return the request's JSON body or raise ``LookupFailure``."""

    data = request.get_json(silent=True)
    if data is None:
        raise LookupFailure(INVALID_REQUEST, message)
    try:
        validator.validate(data)
    except ValidationError as exc:
        raise LookupFailure(INVALID_REQUEST, message) from exc
    return data


__all__ = ["search_request_validator", "login_request_validator", "validated_json"]
