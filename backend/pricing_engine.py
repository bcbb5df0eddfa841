"""
Pricing Engine.

Turns a completed Assessment into the priced breakdown stored on a Quote.
Pure math. Hours × rate, plus cable footage for fixed wireless.

Input: Assessment as a camelCase dict (same shape the API emits)
Output: breakdown dict, hours and costs rounded to cents
"""

import logging

from .config import settings
from .quote_lines import parse_leading_number

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Prices the three service types.

    Fixed wireless (site-assessment) bills an hour per router, an hour of
    configuration and an hour of labor hold, plus cable at a per-foot rate.
    Fleet services bill one installation hour and one labor hold hour, with
    configuration and training included.
    """

    LABOR_HOLD_HOURS = 1
    FWA_CONFIGURATION_HOURS = 1
    FLEET_INSTALLATION_HOURS = 1
    REMOVAL_HOURS_PER_VEHICLE = 0.5

    def __init__(self, hourly_rate: float = None, cable_cost_per_foot: float = None):
        self.hourly_rate = settings.HOURLY_RATE if hourly_rate is None else hourly_rate
        self.cable_cost_per_foot = (
            settings.CABLE_COST_PER_FOOT if cable_cost_per_foot is None else cable_cost_per_foot
        )

    def calculate(self, assessment: dict) -> dict:
        """
        Price an assessment.

        Returns: {
            "surveyHours", "installationHours", "configurationHours",
            "laborHoldHours", "removalHours",
            "surveyCost", "installationCost", "configurationCost",
            "laborHoldCost", "removalCost", "hardwareCost", "trainingCost",
            "totalCost", "hourlyRate", "notes": [str],
        }
        removalHours/removalCost are None unless a removal was requested.
        """
        service_type = assessment.get("serviceType") or "site-assessment"

        if service_type in ("fleet-tracking", "fleet-camera"):
            hours = self._fleet_hours(assessment, service_type)
            hardware_cost = 0.0
        else:
            hours = self._fixed_wireless_hours(assessment)
            hardware_cost = self._cable_cost(assessment)

        survey_cost = self._labor_cost(hours["survey"])
        installation_cost = self._labor_cost(hours["installation"])
        configuration_cost = self._labor_cost(hours["configuration"])
        labor_hold_cost = self._labor_cost(hours["labor_hold"])
        removal_cost = self._labor_cost(hours["removal"]) if hours["removal"] is not None else None
        training_cost = 0.0

        total = round(
            survey_cost + installation_cost + configuration_cost + labor_hold_cost +
            (removal_cost or 0.0) + hardware_cost + training_cost,
            2,
        )

        logger.info(
            "Priced %s assessment %s: %.2f",
            service_type, assessment.get("id"), total,
        )

        return {
            "surveyHours": hours["survey"],
            "installationHours": hours["installation"],
            "configurationHours": hours["configuration"],
            "laborHoldHours": hours["labor_hold"],
            "removalHours": hours["removal"],
            "surveyCost": survey_cost,
            "installationCost": installation_cost,
            "configurationCost": configuration_cost,
            "laborHoldCost": labor_hold_cost,
            "removalCost": removal_cost,
            "hardwareCost": hardware_cost,
            "trainingCost": training_cost,
            "totalCost": total,
            "hourlyRate": self.hourly_rate,
            "notes": self._build_notes(service_type, hours, hardware_cost),
        }

    def _fixed_wireless_hours(self, assessment: dict) -> dict:
        # One installation hour per router
        router_count = self._positive_int(assessment.get("routerCount"), default=1)
        return {
            "survey": 0,
            "installation": router_count,
            "configuration": self.FWA_CONFIGURATION_HOURS,
            "labor_hold": self.LABOR_HOLD_HOURS,
            "removal": None,
        }

    def _fleet_hours(self, assessment: dict, service_type: str) -> dict:
        removal = None
        if service_type == "fleet-camera" and assessment.get("existingSystemRemoval") == "yes":
            vehicles = self._positive_int(assessment.get("deviceCount"), default=1)
            removal = self.REMOVAL_HOURS_PER_VEHICLE * vehicles
        return {
            "survey": 0,
            "installation": self.FLEET_INSTALLATION_HOURS,
            "configuration": 0,
            "labor_hold": self.LABOR_HOLD_HOURS,
            "removal": removal,
        }

    def _cable_cost(self, assessment: dict) -> float:
        """Cable footage × per-foot rate. Reads "50 ft" as 50; unparsable footage prices as zero."""
        raw = assessment.get("cableFootage")
        if raw in (None, ""):
            return 0.0
        footage, exact = parse_leading_number(raw)
        if footage is None:
            logger.warning("Unparsable cable footage %r on assessment %s", raw, assessment.get("id"))
            return 0.0
        if footage < 0:
            logger.warning("Invalid cable footage %r on assessment %s", raw, assessment.get("id"))
            return 0.0
        if not exact:
            logger.info("Cable footage %r on assessment %s read as %s ft", raw, assessment.get("id"), footage)
        return round(footage * self.cable_cost_per_foot, 2)

    def _labor_cost(self, hours: float) -> float:
        return round(hours * self.hourly_rate, 2)

    @staticmethod
    def _positive_int(value, default: int) -> int:
        try:
            n = int(value)
        except (TypeError, ValueError):
            return default
        return n if n >= 1 else default

    def _build_notes(self, service_type: str, hours: dict, hardware_cost: float) -> list:
        notes = [
            f"Labor billed at ${self.hourly_rate:,.2f} per hour.",
            "Labor hold is returned if unused in final billing.",
        ]
        if service_type == "site-assessment":
            notes.append("Router hardware provided by your Wireless Vendor.")
            if hardware_cost > 0:
                notes.append(f"Cable priced at ${self.cable_cost_per_foot:,.2f} per foot.")
        else:
            notes.append("Configuration and training included with fleet installation.")
        if hours["removal"] is not None:
            notes.append(
                f"Existing system removal estimated at {self.REMOVAL_HOURS_PER_VEHICLE} hours per vehicle."
            )
        return notes
