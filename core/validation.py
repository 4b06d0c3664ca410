"""Validation of user-supplied identifiers against their naming rules."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, Optional, Pattern, Tuple

from core.naming_rules import (
    CONFIG_MAP_KEY,
    ENV_VAR_NAME,
    FUNCTION_NAME,
    LABEL_KEY,
    LABEL_VALUE,
    NAMESPACE,
    SECRET_KEY,
    IdentifierRule,
    SegmentRule,
    kind_label,
    load_identifier_rule,
    normalise_kind,
)

logger = logging.getLogger(__name__)

# {{env.NAME}} or {{ env:NAME }}; substituted before the label reaches the cluster.
_PLACEHOLDER_RE = re.compile(r"\{\{\s*env[.:]\w+\s*\}\}")


class RejectionReason(str, Enum):
    EMPTY = "empty"
    RESERVED_LITERAL = "reserved_literal"
    INVALID_CHARACTER = "invalid_character"
    INVALID_ANCHOR = "invalid_anchor"
    STRUCTURE = "structure"
    TOO_LONG = "too_long"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of checking one value against the rule for its kind."""

    kind: str
    value: str
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.reason is None

    def raise_for_rejection(self) -> None:
        if self.reason is not None:
            raise InvalidIdentifierError(self)

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "value": self.value,
            "valid": self.valid,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
        }


class InvalidIdentifierError(ValueError):
    """Raised when an identifier violates the rule for its kind."""

    def __init__(self, outcome: ValidationOutcome) -> None:
        super().__init__(outcome.message)
        self.outcome = outcome

    @property
    def kind(self) -> str:
        return self.outcome.kind

    @property
    def reason(self) -> Optional[RejectionReason]:
        return self.outcome.reason


def is_template_placeholder(value: str) -> bool:
    """Return ``True`` when the whole value is an ``{{env.NAME}}`` placeholder."""

    return _PLACEHOLDER_RE.fullmatch(value) is not None


@lru_cache(maxsize=None)
def _compile(char_class: str) -> Pattern[str]:
    return re.compile(char_class)


def _matches(char_class: Optional[str], char: str) -> bool:
    if char_class is None:
        return True
    return _compile(char_class).fullmatch(char) is not None


def _format_chars(chars) -> str:
    return ", ".join(repr(char) for char in sorted(set(chars)))


def _check_segment(
    segment: str, segment_rule: SegmentRule, rule: IdentifierRule
) -> Optional[Tuple[RejectionReason, str]]:
    """Apply charset, anchor and length checks to one segment."""

    if segment_rule.max_length is not None and len(segment) > segment_rule.max_length:
        excess = len(segment) - segment_rule.max_length
        return (
            RejectionReason.TOO_LONG,
            f"exceeds character limit. Length: {len(segment)} characters, "
            f"Limit: {segment_rule.max_length} characters, "
            f"Over by: {excess} character{'s' if excess != 1 else ''}",
        )

    reserved = [char for char in segment if char in rule.reserved_characters]
    if reserved:
        return (
            RejectionReason.INVALID_CHARACTER,
            f"contains reserved character(s): {_format_chars(reserved)}. "
            f"The delimiters {' '.join(repr(c) for c in rule.reserved_characters)} are not allowed",
        )

    invalid = [char for char in segment if not _matches(segment_rule.allowed_characters, char)]
    if invalid:
        return (
            RejectionReason.INVALID_CHARACTER,
            f"contains invalid character(s): {_format_chars(invalid)}. "
            f"Only {segment_rule.allowed_description} are allowed",
        )

    if not _matches(segment_rule.start_characters, segment[0]):
        return RejectionReason.INVALID_ANCHOR, f"must start with {segment_rule.start_description}"
    if not _matches(segment_rule.end_characters, segment[-1]):
        return RejectionReason.INVALID_ANCHOR, f"must end with {segment_rule.end_description}"

    if segment_rule.pattern and _compile(segment_rule.pattern).fullmatch(segment) is None:
        return RejectionReason.STRUCTURE, segment_rule.pattern_description

    return None


def _evaluate(value: str, rule: IdentifierRule) -> Optional[Tuple[RejectionReason, str]]:
    if rule.allow_placeholder and is_template_placeholder(value):
        return None

    if value == "":
        return None if rule.allow_empty else (RejectionReason.EMPTY, "must not be empty")

    if value in rule.disallowed_literals:
        return RejectionReason.RESERVED_LITERAL, "is a reserved value and cannot be used"

    prefix: Optional[str] = None
    name = value
    if rule.separator:
        parts = value.split(rule.separator)
        if len(parts) > rule.max_segments:
            if rule.max_segments == 1:
                return RejectionReason.STRUCTURE, f"must not contain '{rule.separator}'"
            return (
                RejectionReason.STRUCTURE,
                f"may contain at most one '{rule.separator}' separating an optional prefix and a name",
            )
        if len(parts) == 2:
            prefix, name = parts
            if not prefix:
                return RejectionReason.STRUCTURE, f"must not have an empty prefix before '{rule.separator}'"
            if not name:
                return RejectionReason.STRUCTURE, f"must not have an empty name after '{rule.separator}'"

    if prefix is not None and rule.prefix is not None:
        failure = _check_segment(prefix, rule.prefix, rule)
        if failure:
            reason, detail = failure
            return reason, f"has an invalid prefix '{prefix}': it {detail}"

    failure = _check_segment(name, rule.segment, rule)
    if failure:
        reason, detail = failure
        if prefix is not None:
            return reason, f"has an invalid name '{name}': it {detail}"
        return failure

    if rule.reject_numeric and name.isdigit():
        return RejectionReason.INVALID_ANCHOR, "must not consist only of digits"

    return None


def check_identifier(kind: str, value: str) -> ValidationOutcome:
    """Check ``value`` against the rule for ``kind`` without raising on rejection.

    Raises :class:`core.naming_rules.UnknownIdentifierKindError` when no rule
    exists for ``kind``.
    """

    normalised = normalise_kind(kind)
    rule = load_identifier_rule(normalised)
    failure = _evaluate(value, rule)
    if failure is None:
        return ValidationOutcome(kind=normalised, value=value)

    reason, detail = failure
    message = f"{kind_label(normalised)} '{value}' {detail}"
    logger.debug("Rejected %s (%s): %s", normalised, reason.value, message)
    return ValidationOutcome(kind=normalised, value=value, reason=reason, message=message)


def validate_identifier(kind: str, value: str) -> None:
    """Raise :class:`InvalidIdentifierError` when ``value`` is not a valid ``kind``."""

    check_identifier(kind, value).raise_for_rejection()


def validate_function_name(name: str) -> None:
    """Function names are lowercase DNS labels that are not purely numeric."""

    validate_identifier(FUNCTION_NAME, name)


def validate_namespace(namespace: str) -> None:
    """Namespaces are DNS-1035 labels: they must start with a lowercase letter."""

    validate_identifier(NAMESPACE, namespace)


def validate_env_var_name(name: str) -> None:
    validate_identifier(ENV_VAR_NAME, name)


def validate_config_map_key(key: str) -> None:
    validate_identifier(CONFIG_MAP_KEY, key)


def validate_secret_key(key: str) -> None:
    validate_identifier(SECRET_KEY, key)


def validate_label_key(key: str) -> None:
    """Label keys are ``[prefix/]name`` where the prefix is a DNS subdomain."""

    validate_identifier(LABEL_KEY, key)


def validate_label_value(value: str) -> None:
    """Label values may be empty or an ``{{env.NAME}}`` placeholder."""

    validate_identifier(LABEL_VALUE, value)
