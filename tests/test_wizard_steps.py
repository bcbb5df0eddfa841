"""
Wizard field registry, step validator and progress calculator.

Tests:
1-6.   Step validation (required fields, blanks, unknown steps)
7-10.  Service-specific step 3 fields and the quote gate
11-13. Progress
14-15. Draft merging
16-20. /steps endpoint, soft navigation and the quote gate
"""

import pytest

from backend.wizard.steps import (
    ASSESSMENT_STEPS,
    FLEET_CAMERA,
    FLEET_TRACKING,
    TOTAL_STEPS,
    fields_for_step,
    merge_draft,
    missing_fields,
    quote_gate_missing,
    quote_required_fields,
    required_fields_for_step,
    step_progress,
    step_status,
    validate_step,
)


# --- Step validation ---

def test_step1_requires_name_and_email():
    assert validate_step(1, {"salesExecutiveName": "Jane"}) is False
    assert validate_step(1, {"salesExecutiveName": "Jane", "salesExecutiveEmail": "j@x.com"}) is True


@pytest.mark.parametrize("blank", [None, ""])
def test_blank_values_fail(blank):
    data = {
        "customerCompanyName": "Acme",
        "customerContactName": blank,
        "customerEmail": "a@acme.com",
        "siteAddress": "1 Main St",
    }
    assert validate_step(2, data) is False
    assert missing_fields(2, data) == ["customerContactName"]


def test_zero_counts_as_an_answer():
    assert validate_step(3, {"buildingType": "office", "coverageArea": 0}) is True


def test_other_fields_do_not_matter():
    data = {"salesExecutiveName": "Jane", "salesExecutiveEmail": "j@x.com", "customerEmail": ""}
    assert validate_step(1, data) is True


@pytest.mark.parametrize("step", [0, 6, 99, -1])
def test_unknown_step_never_validates(step, assessment_data):
    assert validate_step(step, assessment_data()) is False


def test_steps_without_required_fields_validate():
    assert validate_step(4, {}) is True
    assert validate_step(5, {}) is True


# --- Service-specific step 3 ---

def test_site_assessment_step3_adds_antenna_fields():
    fields = fields_for_step(3)
    assert "buildingType" in fields
    assert "cableFootage" in fields
    assert "lowSignalAntennaCable" in fields


def test_step3_requirements_ignore_service_type():
    data = {"buildingType": "office", "coverageArea": 500, "serviceType": FLEET_CAMERA}
    assert validate_step(3, data) is True
    assert required_fields_for_step(3) == ["buildingType", "coverageArea"]

    fleet = {"serviceType": FLEET_TRACKING, "buildingType": "vans", "deviceCount": 4}
    assert validate_step(3, fleet) is False
    assert missing_fields(3, fleet) == ["coverageArea"]


def test_fleet_quote_gate_asks_for_device_count():
    assert quote_required_fields(3, FLEET_TRACKING) == ["buildingType", "deviceCount"]
    assert quote_required_fields(3) == ["buildingType", "coverageArea"]
    data = {"serviceType": FLEET_TRACKING, "buildingType": "vans"}
    assert quote_gate_missing(3, data) == ["deviceCount"]
    data["deviceCount"] = 4
    assert quote_gate_missing(3, data) == []


def test_fleet_camera_step3_fields():
    fields = fields_for_step(3, FLEET_CAMERA)
    assert "cameraTypes" in fields
    assert "existingSystemRemoval" in fields
    assert "cableFootage" not in fields


# --- Progress ---

def test_progress_values():
    assert step_progress(1, 5) == 20
    assert step_progress(3, 5) == 60
    assert step_progress(5, 5) == 100


def test_progress_rounds_half_up():
    assert step_progress(1, 3) == 33
    assert step_progress(2, 3) == 67
    assert step_progress(1, 8) == 13


def test_progress_rejects_zero_total():
    with pytest.raises(ValueError):
        step_progress(1, 0)


# --- Draft merging ---

def test_merge_draft_overrides_and_keeps():
    draft = {"salesExecutiveName": "Jane", "customerEmail": "a@acme.com"}
    merged = merge_draft(draft, {"customerEmail": "b@acme.com", "floors": 2})
    assert merged == {"salesExecutiveName": "Jane", "customerEmail": "b@acme.com", "floors": 2}


def test_merge_draft_does_not_mutate():
    draft = {"floors": 1}
    updates = {"floors": 2}
    merge_draft(draft, updates)
    assert draft == {"floors": 1}
    assert updates == {"floors": 2}


# --- Step status and the /steps endpoint ---

def test_step_status_shape():
    status = step_status(1, {"salesExecutiveName": "Jane"})
    assert status["id"] == 1
    assert status["title"] == ASSESSMENT_STEPS[0]["title"]
    assert status["missing"] == ["salesExecutiveEmail"]
    assert status["is_valid"] is False

    with pytest.raises(ValueError):
        step_status(TOTAL_STEPS + 1, {})


def test_steps_endpoint_reports_progress(client, auth_headers):
    resp = client.post("/api/assessments/", json={"salesExecutiveName": "Jane"}, headers=auth_headers)
    assessment_id = resp.json()["id"]

    resp = client.get(f"/api/assessments/{assessment_id}/steps?current_step=3", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["progress"] == 60
    assert data["totalSteps"] == 5
    assert [s["id"] for s in data["steps"]] == [1, 2, 3, 4, 5]
    assert data["steps"][0]["missing"] == ["salesExecutiveEmail"]
    assert data["steps"][3]["is_valid"] is True


def test_steps_endpoint_rejects_out_of_range(client, auth_headers, assessment):
    resp = client.get(f"/api/assessments/{assessment['id']}/steps?current_step=9", headers=auth_headers)
    assert resp.status_code == 422


def test_incomplete_updates_are_saved(client, auth_headers):
    """Navigation is soft: a half-filled step still saves."""
    resp = client.post("/api/assessments/", json={}, headers=auth_headers)
    assessment_id = resp.json()["id"]

    resp = client.put(
        f"/api/assessments/{assessment_id}",
        json={"customerCompanyName": "Acme"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["customerCompanyName"] == "Acme"

    data = client.get(f"/api/assessments/{assessment_id}/steps", headers=auth_headers).json()
    assert data["steps"][1]["is_valid"] is False
    assert "customerCompanyName" not in data["steps"][1]["missing"]


def test_steps_endpoint_reports_quote_gate(client, auth_headers, assessment_data):
    payload = assessment_data(serviceType="fleet-tracking", coverageArea=None, deviceCount=None)
    assessment_id = client.post("/api/assessments/", json=payload, headers=auth_headers).json()["id"]

    step3 = client.get(f"/api/assessments/{assessment_id}/steps", headers=auth_headers).json()["steps"][2]
    assert step3["missing"] == ["coverageArea"]
    assert step3["quote_missing"] == ["deviceCount"]
