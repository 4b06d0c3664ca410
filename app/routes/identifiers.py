"""HTTP routes for validating identifiers before they reach the cluster."""

from __future__ import annotations

import logging

import azure.functions as func
from azure_functions_openapi.decorator import openapi as openapi_doc

from app import app
from app.errors import handle_validation_error
from app.models import (
    BatchValidationRequest,
    BatchValidationResponse,
    IdentifierValueRequest,
    ValidationOutcomeResponse,
)
from app.responses import build_batch_response, build_outcome_response, json_message
from core.naming_rules import UnknownIdentifierKindError
from core.validation import check_identifier


def _check_batch_item(kind: str, value: str) -> dict[str, object]:
    """Check one batch item; an unknown kind rejects that item only."""

    try:
        return check_identifier(kind, value).to_dict()
    except UnknownIdentifierKindError as exc:
        return {"kind": kind, "value": value, "valid": False, "reason": "unknown_kind", "message": str(exc)}


def _handle_validate_request(req: func.HttpRequest) -> func.HttpResponse:
    kind = (req.route_params.get("kind") or "").strip()
    if not kind:
        return json_message("Identifier kind is required.", status_code=400)

    logging.info("[validate_identifier] Validating %s.", kind)

    try:
        payload = req.get_json()
    except ValueError:
        return json_message("Invalid JSON payload.", status_code=400)

    try:
        request = IdentifierValueRequest.model_validate(payload)
        return build_outcome_response(check_identifier(kind, request.value))
    except Exception as exc:
        return handle_validation_error(exc, log_prefix="validate_identifier")


def _handle_batch_request(req: func.HttpRequest) -> func.HttpResponse:
    logging.info("[validate_identifiers] Processing batch validation request.")

    try:
        payload = req.get_json()
    except ValueError:
        return json_message("Invalid JSON payload.", status_code=400)

    try:
        request = BatchValidationRequest.model_validate(payload)
        results = [_check_batch_item(item.kind, item.value) for item in request.items]
        return build_batch_response(results)
    except Exception as exc:
        return handle_validation_error(exc, log_prefix="validate_identifiers")


@app.function_name(name="validate_identifier")
@app.route(route="identifiers/{kind}/validate", methods=[func.HttpMethod.POST])
@openapi_doc(
    summary="Validate a single identifier",
    description=(
        "Checks a value against the naming rule for the identifier kind in the route. "
        "Rejected values are reported with the violated constraint and a message that "
        "starts with the kind label and the quoted value."
    ),
    tags=["Identifiers"],
    request_model=IdentifierValueRequest,
    response_model=ValidationOutcomeResponse,
    operation_id="validateIdentifier",
    route="/identifiers/{kind}/validate",
    method="post",
)
def validate_identifier(req: func.HttpRequest) -> func.HttpResponse:
    """Validate one identifier."""

    return _handle_validate_request(req)


@app.function_name(name="validate_identifiers")
@app.route(route="identifiers/validate", methods=[func.HttpMethod.POST])
@openapi_doc(
    summary="Validate a batch of identifiers",
    description="Validates every item independently and reports whether all of them were accepted.",
    tags=["Identifiers"],
    request_model=BatchValidationRequest,
    response_model=BatchValidationResponse,
    operation_id="validateIdentifiers",
    route="/identifiers/validate",
    method="post",
)
def validate_identifiers(req: func.HttpRequest) -> func.HttpResponse:
    """Validate several identifiers in one request."""

    return _handle_batch_request(req)
