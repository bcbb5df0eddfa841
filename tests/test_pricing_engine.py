"""
Pricing engine tests. Pure math, no database.

Tests:
1-4. Fixed wireless pricing
5-7. Fleet pricing
8-9. Rate overrides and notes
10.  Cable footage typed with units
"""

import pytest

from backend.pricing_engine import PricingEngine


def _sample_fixed_wireless(**overrides):
    data = {
        "id": 7,
        "serviceType": "site-assessment",
        "routerCount": 2,
        "connectionUsage": "primary",
        "lowSignalAntennaCable": "yes",
        "cableFootage": "10",
    }
    data.update(overrides)
    return data


def _sample_fleet(service_type="fleet-tracking", **overrides):
    data = {"id": 8, "serviceType": service_type, "deviceCount": 6, "buildingType": "box trucks"}
    data.update(overrides)
    return data


def test_fixed_wireless_breakdown():
    result = PricingEngine(hourly_rate=190, cable_cost_per_foot=14.5).calculate(_sample_fixed_wireless())
    assert result["installationHours"] == 2
    assert result["installationCost"] == 380
    assert result["configurationCost"] == 190
    assert result["laborHoldCost"] == 190
    assert result["hardwareCost"] == 145.0
    assert result["surveyHours"] == 0
    assert result["removalHours"] is None
    assert result["removalCost"] is None
    assert result["totalCost"] == 905.0


def test_total_is_sum_of_parts():
    result = PricingEngine(hourly_rate=175.5, cable_cost_per_foot=3.33).calculate(
        _sample_fixed_wireless(routerCount=3, cableFootage="37")
    )
    parts = (
        result["surveyCost"] + result["installationCost"] + result["configurationCost"]
        + result["laborHoldCost"] + result["hardwareCost"] + result["trainingCost"]
    )
    assert result["totalCost"] == pytest.approx(parts, abs=0.01)


@pytest.mark.parametrize("footage", [None, "", "lots", "-5", "nan"])
def test_bad_cable_footage_prices_as_zero(footage):
    result = PricingEngine(hourly_rate=190).calculate(_sample_fixed_wireless(cableFootage=footage))
    assert result["hardwareCost"] == 0.0


@pytest.mark.parametrize("routers", [None, "", 0, -2, "two"])
def test_router_count_defaults_to_one(routers):
    result = PricingEngine(hourly_rate=190).calculate(_sample_fixed_wireless(routerCount=routers))
    assert result["installationHours"] == 1


def test_fleet_tracking_breakdown():
    result = PricingEngine(hourly_rate=190).calculate(_sample_fleet())
    assert result["installationCost"] == 190
    assert result["laborHoldCost"] == 190
    assert result["configurationHours"] == 0
    assert result["hardwareCost"] == 0.0
    assert result["removalCost"] is None
    assert result["totalCost"] == 380.0


def test_fleet_camera_removal():
    result = PricingEngine(hourly_rate=190).calculate(
        _sample_fleet("fleet-camera", existingSystemRemoval="yes")
    )
    assert result["removalHours"] == 3.0
    assert result["removalCost"] == 570.0
    assert result["totalCost"] == 950.0


def test_fleet_camera_without_removal():
    result = PricingEngine(hourly_rate=190).calculate(
        _sample_fleet("fleet-camera", existingSystemRemoval="no")
    )
    assert result["removalHours"] is None
    assert result["totalCost"] == 380.0


def test_defaults_come_from_settings():
    engine = PricingEngine()
    assert engine.hourly_rate == 190.0
    assert engine.cable_cost_per_foot == 14.5
    assert engine.calculate(_sample_fixed_wireless())["hourlyRate"] == 190.0


def test_notes_mention_cable_and_removal():
    notes = PricingEngine().calculate(_sample_fixed_wireless())["notes"]
    assert any("per foot" in n for n in notes)

    notes = PricingEngine().calculate(_sample_fleet("fleet-camera", existingSystemRemoval="yes"))["notes"]
    assert any("removal" in n for n in notes)
    assert not any("per foot" in n for n in notes)


@pytest.mark.parametrize("footage, expected", [("50 ft", 725.0), ("12.5'", 181.25), ("37", 536.5)])
def test_cable_footage_reads_leading_number(footage, expected):
    result = PricingEngine(hourly_rate=190, cable_cost_per_foot=14.50).calculate(
        _sample_fixed_wireless(cableFootage=footage)
    )
    assert result["hardwareCost"] == expected
