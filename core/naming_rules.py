# File: core/naming_rules.py
# Version: 1.0.0
# Created: 2026-10-18
# Last Modified: 2026-10-18
# Summary: Built-in identifier rules and the pluggable provider that serves them.
"""Identifier naming rules for the resources a function deployment touches."""

from __future__ import annotations

import importlib
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

FUNCTION_NAME = "function_name"
NAMESPACE = "namespace"
ENV_VAR_NAME = "env_var_name"
CONFIG_MAP_KEY = "config_map_key"
SECRET_KEY = "secret_key"
LABEL_KEY = "label_key"
LABEL_VALUE = "label_value"

KIND_LABELS: Mapping[str, str] = {
    FUNCTION_NAME: "Function name",
    NAMESPACE: "Namespace",
    ENV_VAR_NAME: "Environment variable name",
    CONFIG_MAP_KEY: "ConfigMap key",
    SECRET_KEY: "Secret key",
    LABEL_KEY: "Label key",
    LABEL_VALUE: "Label value",
}

WILDCARD = "*"
LIST_DELIMITERS = (";", ":", ",")


class UnknownIdentifierKindError(KeyError):
    """Raised when no rule is registered for an identifier kind."""

    def __str__(self) -> str:  # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


@dataclass(frozen=True)
class SegmentRule:
    """Character and anchor constraints for one segment of an identifier.

    ``allowed_characters``, ``start_characters`` and ``end_characters`` are
    regular-expression character classes matched against single characters.
    ``None`` means any character is accepted in that position.
    """

    allowed_characters: Optional[str]
    allowed_description: str = ""
    start_characters: Optional[str] = None
    start_description: str = ""
    end_characters: Optional[str] = None
    end_description: str = ""
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    pattern_description: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "allowedCharacters": self.allowed_characters,
            "allowedDescription": self.allowed_description or None,
            "startCharacters": self.start_characters,
            "endCharacters": self.end_characters,
            "maxLength": self.max_length,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class IdentifierRule:
    """Immutable representation of an identifier naming rule."""

    name: str
    segment: SegmentRule
    allow_empty: bool = False
    disallowed_literals: Sequence[str] = (WILDCARD,)
    reserved_characters: Sequence[str] = ()
    reject_numeric: bool = False
    separator: Optional[str] = None
    max_segments: int = 1
    prefix: Optional[SegmentRule] = None
    allow_placeholder: bool = False

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "rule": self.name,
            "allowEmpty": self.allow_empty,
            "disallowedLiterals": list(self.disallowed_literals),
            "reservedCharacters": list(self.reserved_characters),
            "rejectNumeric": self.reject_numeric,
            "allowPlaceholder": self.allow_placeholder,
            "segment": self.segment.to_dict(),
        }
        if self.separator:
            data["separator"] = self.separator
            data["maxSegments"] = self.max_segments
        if self.prefix is not None:
            data["prefix"] = self.prefix.to_dict()
        return data


_LOWER_ALNUM = "[a-z0-9]"
_ALNUM = "[A-Za-z0-9]"

_DNS_LABEL_SEGMENT = SegmentRule(
    allowed_characters="[a-z0-9-]",
    allowed_description="lowercase letters (a-z), digits (0-9) and hyphens (-)",
    start_characters=_LOWER_ALNUM,
    start_description="a lowercase letter or digit",
    end_characters=_LOWER_ALNUM,
    end_description="a lowercase letter or digit",
    max_length=63,
)

_QUALIFIED_NAME_SEGMENT = SegmentRule(
    allowed_characters="[A-Za-z0-9_.-]",
    allowed_description="letters, digits, hyphens (-), underscores (_) and dots (.)",
    start_characters=_ALNUM,
    start_description="an alphanumeric character",
    end_characters=_ALNUM,
    end_description="an alphanumeric character",
    max_length=63,
)

_DNS_SUBDOMAIN_SEGMENT = SegmentRule(
    allowed_characters="[a-z0-9.-]",
    allowed_description="lowercase letters (a-z), digits (0-9), hyphens (-) and dots (.)",
    start_characters=_LOWER_ALNUM,
    start_description="a lowercase letter or digit",
    end_characters=_LOWER_ALNUM,
    end_description="a lowercase letter or digit",
    max_length=253,
    pattern=r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*",
    pattern_description="must be dot-separated labels that each start and end with a lowercase letter or digit",
)

FUNCTION_NAME_RULE = IdentifierRule(
    name="function_name",
    segment=_DNS_LABEL_SEGMENT,
    reject_numeric=True,
)

NAMESPACE_RULE = IdentifierRule(
    name="namespace",
    segment=SegmentRule(
        allowed_characters="[a-z0-9-]",
        allowed_description="lowercase letters (a-z), digits (0-9) and hyphens (-)",
        start_characters="[a-z]",
        start_description="a lowercase letter (it cannot start with a number)",
        end_characters=_LOWER_ALNUM,
        end_description="a lowercase letter or digit",
        max_length=63,
    ),
)

ENV_VAR_NAME_RULE = IdentifierRule(
    name="env_var_name",
    segment=SegmentRule(allowed_characters=None),
    reserved_characters=LIST_DELIMITERS,
)

# ConfigMap and Secret keys share this rule object.
DATA_KEY_RULE = IdentifierRule(
    name="data_key",
    segment=SegmentRule(
        allowed_characters="[A-Za-z0-9_.-]",
        allowed_description="letters, digits, hyphens (-), underscores (_) and dots (.)",
        max_length=253,
    ),
    disallowed_literals=(WILDCARD, ".", ".."),
    reserved_characters=LIST_DELIMITERS,
)

LABEL_KEY_RULE = IdentifierRule(
    name="label_key",
    segment=_QUALIFIED_NAME_SEGMENT,
    reserved_characters=LIST_DELIMITERS,
    separator="/",
    max_segments=2,
    prefix=_DNS_SUBDOMAIN_SEGMENT,
)

LABEL_VALUE_RULE = IdentifierRule(
    name="label_value",
    segment=_QUALIFIED_NAME_SEGMENT,
    allow_empty=True,
    reserved_characters=LIST_DELIMITERS,
    separator="/",
    max_segments=1,
    allow_placeholder=True,
)

DEFAULT_RULES: Mapping[str, IdentifierRule] = {
    FUNCTION_NAME: FUNCTION_NAME_RULE,
    NAMESPACE: NAMESPACE_RULE,
    ENV_VAR_NAME: ENV_VAR_NAME_RULE,
    CONFIG_MAP_KEY: DATA_KEY_RULE,
    SECRET_KEY: DATA_KEY_RULE,
    LABEL_KEY: LABEL_KEY_RULE,
    LABEL_VALUE: LABEL_VALUE_RULE,
}


def normalise_kind(kind: str) -> str:
    """Map ``Label-Key``, ``labelKey`` or ``label key`` style input to ``label_key``."""

    token = str(kind or "").strip()
    snake: List[str] = []
    for index, char in enumerate(token):
        if char.isupper() and index and token[index - 1].islower():
            snake.append("_")
        snake.append(char)
    return "".join(snake).lower().replace("-", "_").replace(" ", "_")


class NamingRuleProvider(Protocol):
    """Contract for pluggable identifier rule providers."""

    def get_rule(self, kind: str) -> IdentifierRule:
        """Return the rule for the given identifier kind."""

    def list_kinds(self) -> Sequence[str]:
        """Enumerate identifier kinds with a rule definition."""


class DictionaryRuleProvider:
    """In-memory provider, used for the built-in table and in tests."""

    def __init__(self, kind_rules: Mapping[str, IdentifierRule]) -> None:
        self._kind_rules = {normalise_kind(key): rule for key, rule in kind_rules.items()}

    def get_rule(self, kind: str) -> IdentifierRule:
        key = normalise_kind(kind)
        try:
            return self._kind_rules[key]
        except KeyError:
            raise UnknownIdentifierKindError(
                f"Unknown identifier kind '{kind}'. Known kinds: {sorted(self._kind_rules)}"
            ) from None

    def list_kinds(self) -> Sequence[str]:
        return tuple(self._kind_rules.keys())


_RULES_PATH_ENV = "IDENTIFIER_RULES_PATH"
_PROVIDER_ENV = "IDENTIFIER_RULE_PROVIDER"


def _load_default_provider() -> NamingRuleProvider:
    builtin = DictionaryRuleProvider(DEFAULT_RULES)
    override = os.environ.get(_RULES_PATH_ENV)
    if not override:
        return builtin

    from providers.json_rules import JsonRuleProvider  # Local import to avoid circular dependency

    return JsonRuleProvider(rules_path=override, base=builtin)


def _load_provider_from_env() -> Optional[NamingRuleProvider]:
    provider_path = os.environ.get(_PROVIDER_ENV)
    if not provider_path:
        return None

    try:
        module_path, _, attr_name = provider_path.rpartition(".")
        if not module_path or not attr_name:
            raise ValueError(f"{_PROVIDER_ENV} must be in 'module.attr' format")

        module = importlib.import_module(module_path)
        factory = getattr(module, attr_name)
        provider = factory() if callable(factory) else factory
        if not hasattr(provider, "get_rule"):
            raise TypeError("Provider must define a 'get_rule' method")
        return provider  # type: ignore[return-value]
    except Exception:
        logger.exception("Failed to load identifier rule provider from environment")
        return None


_provider: NamingRuleProvider = _load_provider_from_env() or _load_default_provider()


def set_rule_provider(provider: NamingRuleProvider) -> None:
    """Override the active rule provider at runtime."""

    global _provider
    _provider = provider


def get_rule_provider() -> NamingRuleProvider:
    """Return the currently active rule provider."""

    return _provider


def load_identifier_rule(kind: str) -> IdentifierRule:
    """Return the rule for the requested identifier kind."""

    return _provider.get_rule(kind)


def kind_label(kind: str) -> str:
    """Return the human-readable label used as the error-message prefix."""

    key = normalise_kind(kind)
    return KIND_LABELS.get(key, key.replace("_", " ").capitalize())


def list_identifier_kinds() -> Sequence[str]:
    """Return the identifier kinds exposed by the active provider."""

    provider = get_rule_provider()
    kinds: List[str] = []
    if hasattr(provider, "list_kinds"):
        kinds.extend(normalise_kind(kind) for kind in provider.list_kinds())
    else:
        kinds.extend(KIND_LABELS.keys())
    seen: set[str] = set()
    ordered: List[str] = []
    for item in kinds:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return tuple(ordered)


def describe_rule(kind: str) -> Dict[str, object]:
    """Provide a JSON-compatible description of an identifier rule."""

    normalised = normalise_kind(kind)
    rule = load_identifier_rule(normalised)
    description: Dict[str, object] = {
        "kind": normalised,
        "label": kind_label(normalised),
    }
    description.update(rule.to_dict())
    return description
