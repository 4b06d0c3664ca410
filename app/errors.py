"""Shared error helpers for HTTP routes."""

from __future__ import annotations

import logging

import azure.functions as func
from pydantic import ValidationError

from core.naming_rules import UnknownIdentifierKindError

from .responses import json_message


def handle_validation_error(exc: Exception, *, log_prefix: str) -> func.HttpResponse:
    if isinstance(exc, UnknownIdentifierKindError):
        return json_message(str(exc), status_code=404)
    if isinstance(exc, ValidationError):
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}"
            for error in exc.errors()
        )
        return json_message(f"Invalid request: {errors}", status_code=400)
    if isinstance(exc, ValueError):
        return json_message(str(exc), status_code=400)

    logging.exception("[%s] Unexpected error", log_prefix)
    return json_message("Error validating identifier.", status_code=500)
