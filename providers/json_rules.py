"""Identifier rule provider that applies overrides loaded from JSON files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Sequence

from core.naming_rules import (
    DEFAULT_RULES,
    DictionaryRuleProvider,
    IdentifierRule,
    NamingRuleProvider,
    UnknownIdentifierKindError,
    normalise_kind,
)

logger = logging.getLogger(__name__)

_OVERRIDE_KEYS = {"max_length", "prefix_max_length", "disallowed_literals"}


@dataclass(slots=True)
class _RuleLayer:
    path: Path
    priority: int
    enabled: bool
    name: str
    rules_config: Dict[str, Mapping[str, Any]]


class JsonRuleProvider(NamingRuleProvider):
    """Layer JSON rule overrides on top of a base provider.

    Overrides are keyed by rule name (``data_key``, ``label_key`` ...), not by
    identifier kind, so every kind that shares a rule keeps sharing it.
    """

    def __init__(
        self,
        *,
        rules_path: str | Path,
        base: NamingRuleProvider | None = None,
    ) -> None:
        self._path = Path(rules_path)
        if not self._path.exists():
            raise FileNotFoundError(f"Identifier rules path '{self._path}' does not exist.")
        self._base = base or DictionaryRuleProvider(DEFAULT_RULES)
        self._kind_rules: Dict[str, IdentifierRule] = {}
        self.reload()

    def reload(self) -> None:
        """Reload rule overrides from disk."""

        layers = _load_rule_layers(self._path)
        if not layers:
            raise ValueError(f"No enabled rule layers found under '{self._path}'.")

        base_rules = {normalise_kind(kind): self._base.get_rule(kind) for kind in self._base.list_kinds()}
        known_names = {rule.name for rule in base_rules.values()}

        overridden: Dict[str, IdentifierRule] = {}
        for layer in layers:
            for rule_name, config in layer.rules_config.items():
                if rule_name not in known_names:
                    raise ValueError(
                        f"Rule layer '{layer.path}' overrides unknown rule '{rule_name}'. "
                        f"Known rules: {sorted(known_names)}"
                    )
                current = overridden.get(rule_name) or next(
                    rule for rule in base_rules.values() if rule.name == rule_name
                )
                overridden[rule_name] = _apply_overrides(current, config, source=layer.path)
                logger.debug("Applied '%s' overrides from layer '%s'", rule_name, layer.name)

        self._kind_rules = {
            kind: overridden.get(rule.name, rule) for kind, rule in base_rules.items()
        }

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

    def export_rules(self) -> Dict[str, IdentifierRule]:
        """Return a copy of the effective per-kind rules for inspection."""

        return dict(self._kind_rules)


def _optional_length(value: object, *, field: str, source: Path) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"'{field}' in '{source}' must be a positive integer or null.")
    return value


def _apply_overrides(rule: IdentifierRule, config: Mapping[str, object], *, source: Path) -> IdentifierRule:
    unknown = set(config) - _OVERRIDE_KEYS
    if unknown:
        raise ValueError(f"Unsupported override(s) {sorted(unknown)} in '{source}'.")

    if "max_length" in config:
        max_length = _optional_length(config["max_length"], field="max_length", source=source)
        rule = replace(rule, segment=replace(rule.segment, max_length=max_length))

    if "prefix_max_length" in config:
        if rule.prefix is None:
            raise ValueError(f"Rule '{rule.name}' has no prefix segment to override in '{source}'.")
        prefix_length = _optional_length(config["prefix_max_length"], field="prefix_max_length", source=source)
        rule = replace(rule, prefix=replace(rule.prefix, max_length=prefix_length))

    literals = config.get("disallowed_literals")
    if literals is not None:
        if not isinstance(literals, Iterable) or isinstance(literals, (str, bytes)):
            raise ValueError(f"'disallowed_literals' in '{source}' must be an array of strings.")
        merged = list(rule.disallowed_literals)
        for literal in literals:
            if not str(literal):
                raise ValueError(f"'disallowed_literals' in '{source}' must not contain empty strings.")
            if str(literal) not in merged:
                merged.append(str(literal))
        rule = replace(rule, disallowed_literals=tuple(merged))

    return rule


def _load_rule_layers(path: Path) -> list[_RuleLayer]:
    if path.is_dir():
        candidates = sorted(file for file in path.glob("*.json") if file.is_file())
        layers = [_parse_rule_layer(candidate) for candidate in candidates]
    else:
        layers = [_parse_rule_layer(path)]

    enabled_layers = [layer for layer in layers if layer.enabled]
    enabled_layers.sort(key=lambda layer: (layer.priority, layer.path.name))
    return enabled_layers


def _parse_rule_layer(path: Path) -> _RuleLayer:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError(f"Rule file '{path}' must contain a JSON object at the top level.")

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise ValueError(f"Rule file '{path}' must contain an object for 'metadata'.")

    priority = int(metadata.get("priority", 0))
    enabled = bool(metadata.get("enabled", True))
    name = str(metadata.get("name") or path.stem)

    rules_config_raw = data.get("rules") or {}
    if not isinstance(rules_config_raw, Mapping):
        raise ValueError(f"'rules' in '{path}' must be an object mapping rule names to overrides.")

    rules_config: Dict[str, Mapping[str, Any]] = {}
    for key, value in rules_config_raw.items():
        if not isinstance(value, Mapping):
            raise ValueError(f"Override for '{key}' in '{path}' must be an object.")
        rules_config[str(key).lower()] = value

    return _RuleLayer(
        path=path,
        priority=priority,
        enabled=enabled,
        name=name,
        rules_config=rules_config,
    )


def load_provider_from_json(path: str | Path) -> JsonRuleProvider:
    """Convenience helper for environment-driven configuration."""

    return JsonRuleProvider(rules_path=path)
