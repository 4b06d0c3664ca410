"""Routes exposing identifier rule specifications as JSON."""

from __future__ import annotations

import azure.functions as func
from azure_functions_openapi.decorator import openapi as openapi_doc

from app import app
from app.models import IdentifierKindsResponse
from app.responses import json_message, json_payload
from core import naming_rules


def _handle_list_rules(req: func.HttpRequest) -> func.HttpResponse:
    expand = (req.params.get("expand") or "").lower()
    kinds = naming_rules.list_identifier_kinds()

    if expand in {"details", "full"}:
        details = [naming_rules.describe_rule(kind) for kind in kinds]
        return json_payload({"rules": details})

    return json_payload({"kinds": list(kinds)})


def _handle_get_rule(req: func.HttpRequest) -> func.HttpResponse:
    kind = (req.route_params.get("kind") or "").strip()
    if not kind:
        return json_message("Identifier kind is required.", status_code=400)

    try:
        rule_description = naming_rules.describe_rule(kind)
    except naming_rules.UnknownIdentifierKindError as exc:
        return json_message(str(exc), status_code=404)

    return json_payload(rule_description)


@app.function_name(name="list_identifier_rules")
@app.route(route="rules", methods=[func.HttpMethod.GET], auth_level=func.AuthLevel.ANONYMOUS)
@openapi_doc(
    summary="List identifier kinds",
    description="Returns the identifier kinds with a naming rule. Use ?expand=details for full rule data.",
    tags=["Identifier Rules"],
    response_model=IdentifierKindsResponse,
    operation_id="listIdentifierRules",
    route="/rules",
    method="get",
)
def list_identifier_rules(req: func.HttpRequest) -> func.HttpResponse:
    """Return the collection of known identifier rules."""

    return _handle_list_rules(req)


@app.function_name(name="get_identifier_rule")
@app.route(route="rules/{kind}", methods=[func.HttpMethod.GET], auth_level=func.AuthLevel.ANONYMOUS)
@openapi_doc(
    summary="Retrieve an identifier rule",
    description="Returns the character classes, anchors, length limits and structure for one identifier kind.",
    tags=["Identifier Rules"],
    operation_id="getIdentifierRule",
    route="/rules/{kind}",
    method="get",
)
def get_identifier_rule(req: func.HttpRequest) -> func.HttpResponse:
    """Return the rule details for a single identifier kind."""

    return _handle_get_rule(req)
