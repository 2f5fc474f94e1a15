import json

import yaml

from common.compliance_rules.catalog import build_catalog, main


def test_catalog_lists_every_rule():
    catalog = build_catalog()
    keys = [e.rule_key for e in catalog]
    assert len(keys) == 10
    assert keys == sorted(keys)

    by_key = {e.rule_key: e for e in catalog}
    gates = {k for k, e in by_key.items() if e.is_gate}
    assert gates == {
        "CONFERENCE_NOTES_REQUIRED",
        "INITIAL_IEP_CONSENT_GATE",
        "CONTINUED_MEETING_NOTICE_DAYS",
        "CONTINUED_MEETING_MUTUAL_AGREEMENT",
        "AUDIO_RECORDING_RULE",
    }
    assert by_key["PRE_MEETING_DOCS_DAYS"].default_config == {"days": 5}
    assert by_key["DEFAULT_DELIVERY_METHOD"].default_config == {"method": "SEND_HOME"}
    assert "staffMustRecordIfParentRecords" in by_key["AUDIO_RECORDING_RULE"].config_schema["properties"]


def test_catalog_cli_json(capsys):
    main(["--format", "json"])
    data = json.loads(capsys.readouterr().out)
    assert len(data) == 10


def test_catalog_cli_yaml(capsys):
    main([])
    data = yaml.safe_load(capsys.readouterr().out)
    assert {entry["rule_key"] for entry in data} >= {"AUDIO_RECORDING_RULE", "PRE_MEETING_DOCS_DAYS"}
