import json
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core import naming_rules, validation
from providers.json_rules import JsonRuleProvider, load_provider_from_json


def _write_rules(tmp_path, filename, payload):
    rules_file = tmp_path / filename
    rules_file.write_text(json.dumps(payload), encoding="utf-8")
    return rules_file


def _base_rule_payload():
    return {
        "metadata": {"name": "base", "priority": 0},
        "rules": {
            "function_name": {"max_length": 40},
        },
    }


def test_provider_merges_layers_by_priority(tmp_path):
    _write_rules(tmp_path, "base.json", _base_rule_payload())
    overlay = {
        "metadata": {"name": "overlay", "priority": 10},
        "rules": {
            "function_name": {"max_length": 30, "disallowed_literals": ["func"]},
        },
    }
    _write_rules(tmp_path, "overlay.json", overlay)

    provider = JsonRuleProvider(rules_path=tmp_path)

    rule = provider.get_rule("function_name")
    assert rule.segment.max_length == 30
    assert rule.disallowed_literals == ("*", "func")
    assert rule.reject_numeric is True

    # Rules without overrides are the built-in ones
    assert provider.get_rule("namespace") is naming_rules.NAMESPACE_RULE


def test_provider_skips_disabled_layers(tmp_path):
    _write_rules(tmp_path, "base.json", _base_rule_payload())
    disabled = {
        "metadata": {"name": "disabled", "priority": 999, "enabled": False},
        "rules": {"function_name": {"max_length": 10}},
    }
    _write_rules(tmp_path, "disabled.json", disabled)

    provider = JsonRuleProvider(rules_path=tmp_path)
    assert provider.get_rule("function_name").segment.max_length == 40


def test_data_key_override_keeps_config_map_and_secret_keys_equivalent(tmp_path):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"data_key": {"max_length": 8}}})

    provider = JsonRuleProvider(rules_path=rules_file)

    assert provider.get_rule("config_map_key") is provider.get_rule("secret_key")
    assert provider.get_rule("secret_key").segment.max_length == 8


def test_max_length_can_be_disabled(tmp_path):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"label_value": {"max_length": None}}})

    provider = JsonRuleProvider(rules_path=rules_file)
    original_provider = naming_rules.get_rule_provider()
    try:
        naming_rules.set_rule_provider(provider)
        validation.validate_label_value("a" * 100)
    finally:
        naming_rules.set_rule_provider(original_provider)


def test_prefix_override_applies_to_label_keys(tmp_path):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"label_key": {"prefix_max_length": 5}}})

    provider = JsonRuleProvider(rules_path=rules_file)
    original_provider = naming_rules.get_rule_provider()
    try:
        naming_rules.set_rule_provider(provider)
        outcome = validation.check_identifier("label_key", "example.com/example")
        assert outcome.reason is validation.RejectionReason.TOO_LONG
        assert "invalid prefix 'example.com'" in outcome.message
    finally:
        naming_rules.set_rule_provider(original_provider)


def test_prefix_override_requires_prefixed_rule(tmp_path):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"namespace": {"prefix_max_length": 5}}})

    with pytest.raises(ValueError):
        JsonRuleProvider(rules_path=rules_file)


def test_overridden_rules_still_reject_wildcard(tmp_path):
    rules_file = _write_rules(
        tmp_path, "rules.json", {"rules": {"env_var_name": {"disallowed_literals": ["PATH"]}}}
    )

    rule = JsonRuleProvider(rules_path=rules_file).get_rule("env_var_name")

    assert rule.disallowed_literals == ("*", "PATH")


def test_provider_reload_picks_up_directory_changes(tmp_path):
    _write_rules(tmp_path, "base.json", _base_rule_payload())

    provider = JsonRuleProvider(rules_path=tmp_path)
    assert provider.get_rule("function_name").segment.max_length == 40

    updated_base = _base_rule_payload()
    updated_base["rules"]["function_name"]["max_length"] = 50
    _write_rules(tmp_path, "base.json", updated_base)

    provider.reload()
    assert provider.get_rule("function_name").segment.max_length == 50


def test_provider_accepts_single_file(tmp_path):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {}})

    provider = load_provider_from_json(rules_file)
    assert provider.export_rules()["label_key"] is naming_rules.LABEL_KEY_RULE


def test_provider_requires_existing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        JsonRuleProvider(rules_path=tmp_path / "missing.json")


def test_provider_requires_enabled_layer(tmp_path):
    _write_rules(tmp_path, "off.json", {"metadata": {"enabled": False}, "rules": {}})

    with pytest.raises(ValueError):
        JsonRuleProvider(rules_path=tmp_path)


def test_provider_rejects_unknown_rule(tmp_path):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"pod_name": {"max_length": 5}}})

    with pytest.raises(ValueError):
        JsonRuleProvider(rules_path=rules_file)


def test_provider_rejects_unknown_kind_lookup(tmp_path):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {}})

    provider = JsonRuleProvider(rules_path=rules_file)
    with pytest.raises(naming_rules.UnknownIdentifierKindError):
        provider.get_rule("pod_name")


@pytest.mark.parametrize(
    "override",
    [
        {"max_length": 0},
        {"max_length": "63"},
        {"max_length": True},
        {"disallowed_literals": "func"},
        {"allowed_characters": "[a-z]"},
    ],
)
def test_provider_rejects_invalid_overrides(tmp_path, override):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"function_name": override}})

    with pytest.raises(ValueError):
        JsonRuleProvider(rules_path=rules_file)


@pytest.mark.parametrize("invalid", [None, 123, "text"])
def test_provider_rejects_invalid_rule_config(tmp_path, invalid):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"function_name": invalid}})

    with pytest.raises(ValueError):
        JsonRuleProvider(rules_path=rules_file)


@pytest.mark.parametrize("literals", [[""], ["func", ""]])
def test_provider_rejects_empty_disallowed_literals(tmp_path, literals):
    rules_file = _write_rules(tmp_path, "rules.json", {"rules": {"function_name": {"disallowed_literals": literals}}})

    with pytest.raises(ValueError):
        JsonRuleProvider(rules_path=rules_file)
