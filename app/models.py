"""Pydantic models shared across HTTP routes."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from app.constants import MAX_BATCH_SIZE


class IdentifierValueRequest(BaseModel):
    """Payload for validating a single value against the kind in the route."""

    value: str = Field(..., description="Raw identifier to validate. It is not trimmed or case-folded.")


class IdentifierValidationRequest(BaseModel):
    """One entry of a batch validation request."""

    kind: str = Field(..., description="Identifier kind (e.g. function_name, namespace, label_key).")
    value: str = Field(..., description="Raw identifier to validate.")


class BatchValidationRequest(BaseModel):
    items: List[IdentifierValidationRequest] = Field(..., min_length=1, max_length=MAX_BATCH_SIZE)


class ValidationOutcomeResponse(BaseModel):
    """Outcome of validating one identifier."""

    kind: str
    value: str
    valid: bool
    reason: str | None = Field(default=None, description="Violated constraint when the value is rejected.")
    message: str | None = Field(default=None, description="Human-readable rejection message.")


class BatchValidationResponse(BaseModel):
    valid: bool = Field(..., description="True when every item was accepted.")
    results: List[ValidationOutcomeResponse]


class IdentifierKindsResponse(BaseModel):
    kinds: List[str]
