import json
import pathlib
import sys
from types import SimpleNamespace

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.routes import rules as rule_routes
from app.routes.docs import _normalise_openapi_spec
from core import naming_rules


def test_list_rules_returns_kinds():
    request = SimpleNamespace(params={}, route_params={}, headers={})

    response = rule_routes._handle_list_rules(request)

    assert response.status_code == 200
    assert json.loads(response.get_body()) == {"kinds": list(naming_rules.KIND_LABELS)}


def test_list_rules_expands_details():
    request = SimpleNamespace(params={"expand": "Details"}, route_params={}, headers={})

    response = rule_routes._handle_list_rules(request)

    rules = json.loads(response.get_body())["rules"]
    assert [rule["kind"] for rule in rules] == list(naming_rules.KIND_LABELS)
    secret = next(rule for rule in rules if rule["kind"] == "secret_key")
    assert secret["rule"] == "data_key"


def test_get_rule_returns_description():
    request = SimpleNamespace(params={}, route_params={"kind": "namespace"}, headers={})

    response = rule_routes._handle_get_rule(request)

    body = json.loads(response.get_body())
    assert response.status_code == 200
    assert body["label"] == "Namespace"
    assert body["segment"]["startCharacters"] == "[a-z]"


def test_get_rule_unknown_kind_returns_404():
    request = SimpleNamespace(params={}, route_params={"kind": "pod"}, headers={})

    response = rule_routes._handle_get_rule(request)

    assert response.status_code == 404


def test_get_rule_requires_kind():
    request = SimpleNamespace(params={}, route_params={}, headers={})

    response = rule_routes._handle_get_rule(request)

    assert response.status_code == 400


def test_normalise_openapi_spec_hoists_defs():
    raw = {
        "openapi": "3.0.0",
        "paths": {
            "/identifiers/validate": {
                "post": {
                    "responses": {
                        "200": {
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "$defs": {
                                            "ValidationOutcomeResponse": {
                                                "type": "object",
                                                "properties": {"valid": {"type": "boolean"}},
                                            }
                                        },
                                        "properties": {
                                            "results": {"$ref": "#/$defs/ValidationOutcomeResponse"}
                                        },
                                    }
                                }
                            }
                        }
                    }
                }
            }
        },
    }

    normalised = json.loads(_normalise_openapi_spec(json.dumps(raw)))
    schema = normalised["paths"]["/identifiers/validate"]["post"]["responses"]["200"]["content"][
        "application/json"
    ]["schema"]
    assert schema["properties"]["results"]["$ref"] == "#/components/schemas/ValidationOutcomeResponse"
    assert normalised["components"]["schemas"]["ValidationOutcomeResponse"]["type"] == "object"
    assert {"url": "/api"} in normalised["servers"]


def test_normalise_openapi_spec_documents_kind_parameter():
    raw = {
        "openapi": "3.0.0",
        "paths": {
            "/identifiers/{kind}/validate": {
                "post": {"parameters": [{"name": "kind", "in": "path", "required": True}]}
            },
            "/rules/{kind}": {"get": {}},
            "/rules": {"get": {}},
        },
    }

    normalised = json.loads(_normalise_openapi_spec(json.dumps(raw), ("namespace", "label_key")))
    paths = normalised["paths"]

    validate_params = paths["/identifiers/{kind}/validate"]["post"]["parameters"]
    assert len(validate_params) == 1
    assert validate_params[0]["schema"]["enum"] == ["namespace", "label_key"]
    assert paths["/rules/{kind}"]["get"]["parameters"][0]["name"] == "kind"
    assert "parameters" not in paths["/rules"]["get"]
