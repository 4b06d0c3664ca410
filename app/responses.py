"""Helper utilities for building HTTP responses."""

from __future__ import annotations

import json
from typing import Iterable, Mapping

import azure.functions as func

from core.validation import ValidationOutcome


def build_outcome_response(outcome: ValidationOutcome) -> func.HttpResponse:
    return json_payload(outcome.to_dict())


def build_batch_response(items: Iterable[Mapping[str, object]]) -> func.HttpResponse:
    results = [dict(item) for item in items]
    return json_payload({"valid": all(item["valid"] for item in results), "results": results})


def json_message(message: str, *, status_code: int) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps({"message": message}),
        mimetype="application/json",
        status_code=status_code,
    )


def json_payload(payload: Mapping[str, object], *, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload),
        mimetype="application/json",
        status_code=status_code,
    )
