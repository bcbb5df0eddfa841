"""
Field registry, step validator and progress calculator for the assessment wizard.

Field names are the wire names the wizard sends (camelCase), so the same
dict that comes off the API can be validated without translation.

Step validation is soft: the API accepts partial updates at any step and
only quote generation insists that steps 1-3 are complete. The validator
uses one required-field table for every service; the quote gate swaps the
step-3 requirements for the fleet services.
"""

import math
from typing import Optional

SITE_ASSESSMENT = "site-assessment"
FLEET_TRACKING = "fleet-tracking"
FLEET_CAMERA = "fleet-camera"

SERVICE_TYPES = (SITE_ASSESSMENT, FLEET_TRACKING, FLEET_CAMERA)

ASSESSMENT_STEPS: list[dict] = [
    {
        "id": 1,
        "title": "Sales Executive Information",
        "description": "Enter your organization and contact details",
        "fields": ["salesExecutiveName", "salesExecutiveEmail", "salesExecutivePhone", "organizationId"],
    },
    {
        "id": 2,
        "title": "Customer Information",
        "description": "Collect customer contact and site details",
        "fields": [
            "customerCompanyName", "customerContactName", "customerEmail", "customerPhone",
            "siteAddress", "industry", "preferredInstallationDate",
        ],
    },
    {
        "id": 3,
        "title": "Site Assessment",
        "description": "Assess technical requirements and site characteristics",
        "fields": [
            "buildingType", "coverageArea", "floors", "deviceCount", "routerCount",
            "powerAvailable", "ethernetRequired", "ceilingMount", "outdoorCoverage",
            "interferenceSources", "specialRequirements",
        ],
    },
    {
        "id": 4,
        "title": "File Upload",
        "description": "Upload site photos and supporting documents",
        "fields": [],
    },
    {
        "id": 5,
        "title": "Quote Generation",
        "description": "Review assessment and generate quote",
        "fields": ["additionalNotes"],
    },
]

TOTAL_STEPS = len(ASSESSMENT_STEPS)

# Step 3 differs by service. Fixed wireless adds the connection/antenna survey
# on top of the building fields; the fleet services replace the building
# survey with vehicle questions (buildingType holds the vehicle types).
SITE_ASSESSMENT_EXTRA_FIELDS = [
    "networkSignal", "signalStrength", "connectionUsage", "routerLocation", "antennaCable",
    "deviceConnectionAssistance", "lowSignalAntennaCable", "antennaType",
    "antennaInstallationLocation", "routerMounting", "dualWanSupport", "ceilingHeight",
    "ceilingType", "routerMake", "routerModel", "cableFootage",
]

FLEET_STEP3_FIELDS = {
    FLEET_TRACKING: ["deviceCount", "totalFleetSize", "buildingType", "specialRequirements"],
    FLEET_CAMERA: [
        "deviceCount", "totalFleetSize", "buildingType", "cameraTypes",
        "existingSystemRemoval", "specialRequirements",
    ],
}

REQUIRED_FIELDS: dict[int, list[str]] = {
    1: ["salesExecutiveName", "salesExecutiveEmail"],
    2: ["customerCompanyName", "customerContactName", "customerEmail", "siteAddress"],
    3: ["buildingType", "coverageArea"],
}

# Quote gate only; the step validator keeps REQUIRED_FIELDS for every service
FLEET_STEP3_REQUIRED = ["buildingType", "deviceCount"]


def get_step(step: int) -> Optional[dict]:
    """Return the step config for a step number, or None."""
    for s in ASSESSMENT_STEPS:
        if s["id"] == step:
            return s
    return None


def fields_for_step(step: int, service_type: str = SITE_ASSESSMENT) -> list[str]:
    """Fields collected on a step for a given service type."""
    config = get_step(step)
    if not config:
        return []
    if step == 3:
        if service_type in FLEET_STEP3_FIELDS:
            return list(FLEET_STEP3_FIELDS[service_type])
        return config["fields"] + SITE_ASSESSMENT_EXTRA_FIELDS
    return list(config["fields"])


def required_fields_for_step(step: int) -> list[str]:
    """Fields that must be filled before a step counts as complete. Same for every service."""
    return list(REQUIRED_FIELDS.get(step, []))


def quote_required_fields(step: int, service_type: str = SITE_ASSESSMENT) -> list[str]:
    """
    Fields a quote needs from a step.

    Fleet services have no building to measure, so step 3 asks for the
    vehicle types and count instead of the coverage area.
    """
    if step == 3 and service_type in FLEET_STEP3_FIELDS:
        return list(FLEET_STEP3_REQUIRED)
    return required_fields_for_step(step)


def is_filled(value) -> bool:
    # 0 and False are answers; only None and '' are blanks
    return value is not None and value != ""


def _blank(fields: list[str], data: dict) -> list[str]:
    return [field for field in fields if not is_filled(data.get(field))]


def missing_fields(step: int, data: dict) -> list[str]:
    """Required fields of a step that are still blank, in registry order."""
    return _blank(required_fields_for_step(step), data)


def validate_step(step: int, data: dict) -> bool:
    """Can the wizard move past this step? Unknown steps never validate."""
    if get_step(step) is None:
        return False
    return not missing_fields(step, data)


def quote_gate_missing(step: int, data: dict) -> list[str]:
    """Blank fields that block quote generation, by the assessment's service type."""
    service_type = data.get("serviceType") or SITE_ASSESSMENT
    return _blank(quote_required_fields(step, service_type), data)


def step_status(step: int, data: dict) -> dict:
    """Full status of one step for the wizard UI."""
    config = get_step(step)
    if config is None:
        raise ValueError(f"Unknown wizard step: {step}")
    service_type = data.get("serviceType") or SITE_ASSESSMENT
    missing = missing_fields(step, data)
    return {
        "id": config["id"],
        "title": config["title"],
        "description": config["description"],
        "fields": fields_for_step(step, service_type),
        "required": required_fields_for_step(step),
        "missing": missing,
        "is_valid": not missing,
        "quote_missing": quote_gate_missing(step, data),
    }


def step_progress(current_step: int, total_steps: int = TOTAL_STEPS) -> int:
    """Percentage of the wizard done at current_step, rounded half up."""
    if total_steps <= 0:
        raise ValueError("total_steps must be positive")
    return int(math.floor(current_step / total_steps * 100 + 0.5))


def merge_draft(draft: dict, updates: dict) -> dict:
    """Apply a partial update to a draft assessment. Neither input is mutated."""
    return {**draft, **updates}
