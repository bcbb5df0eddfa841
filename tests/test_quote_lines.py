"""
Quote line-item selector and statement-of-work selection.

Tests:
1-8.   Line selection rules
9-13.  Default resolution (missing, truncated, malformed)
14-17. Statement-of-work selection
18-20. Statement-of-work library
"""

import logging

import pytest

from backend.quote_lines import (
    SOURCE_MALFORMED,
    SOURCE_MISSING,
    SOURCE_TRUNCATED,
    SOURCE_VALUE,
    StatementOfWorkLibrary,
    build_line_items,
    build_quote_presentation,
    resolve_amount,
    select_statement_of_work,
    sow_library,
)


def _sample_quote(**overrides):
    """Installation-only quote, every amount present."""
    quote = {
        "id": 1,
        "surveyHours": "0",
        "surveyCost": "0",
        "installationHours": "2",
        "installationCost": "380",
        "configurationHours": "0",
        "configurationCost": "0",
        "laborHoldHours": "0",
        "laborHoldCost": "0",
        "removalHours": "0",
        "removalCost": "0",
        "hardwareCost": "0",
        "hourlyRate": "190",
        "totalCost": "380",
    }
    quote.update(overrides)
    return quote


def _keys(lines):
    return [line["key"] for line in lines]


# --- Line selection ---

def test_installation_only_quote():
    lines = build_line_items(_sample_quote())
    assert _keys(lines) == ["installation", "training", "total"]
    assert lines[0]["hours"] == 2.0
    assert lines[0]["rate"] == 190.0
    assert lines[0]["cost"] == 380.0
    assert lines[1]["included"] is True
    assert lines[-1]["cost"] == 380.0


def test_full_fixed_wireless_quote_order():
    quote = _sample_quote(
        surveyHours="1", surveyCost="190",
        configurationHours="1", configurationCost="190",
        laborHoldHours="1", laborHoldCost="190",
        hardwareCost="725", totalCost="1675",
    )
    assert _keys(build_line_items(quote)) == [
        "survey", "installation", "configuration", "labor_hold", "hardware", "training", "total",
    ]


def test_configuration_included_when_unpriced():
    lines = build_line_items(_sample_quote(configurationHours="2", configurationCost="0"))
    keys = _keys(lines)
    assert "configuration_included" in keys
    assert "configuration" not in keys
    included = lines[keys.index("configuration_included")]
    assert included["included"] is True
    assert included["cost"] is None


@pytest.mark.parametrize("hours, cost", [
    ("0", "0"), ("0", "190"), ("1", "0"), ("1", "190"), ("", "190"), ("abc", "0"),
])
def test_configuration_lines_are_exclusive(hours, cost):
    keys = _keys(build_line_items(_sample_quote(configurationHours=hours, configurationCost=cost)))
    assert not ("configuration" in keys and "configuration_included" in keys)


def test_labor_hold_shown_on_cost_alone():
    keys = _keys(build_line_items(_sample_quote(laborHoldHours="0", laborHoldCost="190")))
    assert "labor_hold" in keys


def test_removal_line_for_fleet_camera():
    lines = build_line_items(_sample_quote(removalHours="2", removalCost="380"))
    removal = [line for line in lines if line["key"] == "removal"]
    assert removal and removal[0]["label"] == "Existing System Removal"
    assert removal[0]["hours"] == 2.0


def test_total_is_not_resummed():
    lines = build_line_items(_sample_quote(totalCost="999.99"))
    assert lines[-1]["cost"] == 999.99


def test_selection_is_repeatable():
    quote = _sample_quote(configurationHours="1", configurationCost="190")
    assert build_line_items(quote) == build_line_items(quote)


# --- Default resolution ---

def test_resolve_amount_sources():
    assert resolve_amount({"a": "12.50"}, "a") == (12.5, SOURCE_VALUE)
    assert resolve_amount({"a": " 12.50 "}, "a") == (12.5, SOURCE_VALUE)
    assert resolve_amount({"a": "0"}, "a") == (0.0, SOURCE_VALUE)
    assert resolve_amount({"a": ""}, "a") == (0.0, SOURCE_MISSING)
    assert resolve_amount({}, "a") == (0.0, SOURCE_MISSING)
    assert resolve_amount({"a": "twelve"}, "a") == (0.0, SOURCE_MALFORMED)
    assert resolve_amount({"a": "nan"}, "a") == (0.0, SOURCE_MALFORMED)
    assert resolve_amount({"a": True}, "a") == (0.0, SOURCE_MALFORMED)


def test_trailing_text_keeps_leading_number(caplog):
    assert resolve_amount({"a": "12.50abc"}, "a") == (12.5, SOURCE_TRUNCATED)
    assert resolve_amount({"a": ".5h"}, "a") == (0.5, SOURCE_TRUNCATED)
    assert resolve_amount({"a": "1e2x"}, "a") == (100.0, SOURCE_TRUNCATED)

    with caplog.at_level(logging.WARNING, logger="backend.quote_lines"):
        lines = build_line_items(_sample_quote(installationCost="3,80"))
    assert lines[0]["cost"] == 3.0
    assert any("installationCost" in r.getMessage() for r in caplog.records)


def test_malformed_amount_renders_as_zero_and_logs(caplog):
    with caplog.at_level(logging.WARNING, logger="backend.quote_lines"):
        lines = build_line_items(_sample_quote(installationCost="USD 380"))
    assert lines[0]["cost"] == 0.0
    assert any("installationCost" in r.getMessage() for r in caplog.records)


def test_presentation_reports_defaulted_fields():
    quote = _sample_quote(hardwareCost="n/a", configurationCost="190.00 est")
    del quote["surveyCost"]
    presentation = build_quote_presentation(quote, {"serviceType": "fleet-tracking"})
    assert presentation["defaultedFields"] == {
        "surveyCost": SOURCE_MISSING,
        "configurationCost": SOURCE_TRUNCATED,
        "hardwareCost": SOURCE_MALFORMED,
    }


def test_missing_hourly_rate_defaults():
    quote = _sample_quote()
    del quote["hourlyRate"]
    assert build_line_items(quote)[0]["rate"] == 190.0


# --- Statement of work ---

@pytest.mark.parametrize("assessment, expected", [
    ({"serviceType": "site-assessment", "connectionUsage": "primary", "lowSignalAntennaCable": "yes"},
     "primary_with_antenna"),
    ({"serviceType": "site-assessment", "connectionUsage": "primary", "lowSignalAntennaCable": "no"},
     "primary_only"),
    ({"serviceType": "site-assessment", "connectionUsage": "primary"}, "primary_only"),
    ({"serviceType": "site-assessment", "connectionUsage": "failover", "lowSignalAntennaCable": "yes"},
     "failover_with_antenna"),
    ({"serviceType": "fleet-camera"}, "fleet_camera"),
])
def test_sow_selection(assessment, expected):
    assert select_statement_of_work(assessment) == expected


@pytest.mark.parametrize("usage", [None, "primary", "failover"])
def test_fleet_tracking_ignores_connection_usage(usage):
    assessment = {"serviceType": "fleet-tracking", "connectionUsage": usage, "lowSignalAntennaCable": "yes"}
    assert select_statement_of_work(assessment) == "fleet_tracking_obd"


def test_failover_without_antenna_has_no_sow():
    assessment = {"serviceType": "site-assessment", "connectionUsage": "failover", "lowSignalAntennaCable": "no"}
    assert select_statement_of_work(assessment) is None


def test_site_assessment_without_usage_has_no_sow():
    assert select_statement_of_work({"serviceType": "site-assessment"}) is None


def test_every_selectable_sow_exists():
    available = sow_library.list_available()
    for key in ("fleet_tracking_obd", "fleet_camera", "primary_with_antenna",
                "primary_only", "failover_with_antenna"):
        assert key in available
        block = sow_library.load(key)
        assert block["key"] == key
        assert block["title"]
        assert block["sections"]


def test_sow_library_get_none():
    assert sow_library.get(None) is None


def test_sow_library_unknown_key(tmp_path):
    library = StatementOfWorkLibrary(tmp_path)
    with pytest.raises(FileNotFoundError):
        library.load("does_not_exist")
