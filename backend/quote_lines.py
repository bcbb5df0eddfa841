"""
Quote line-item selector.

Takes a Quote and its Assessment as plain camelCase dicts (the same shape the
API emits) and decides which cost rows to show, in display order, and which
statement-of-work block goes under them.

Amounts arrive as decimal strings. A blank or unparsable amount counts as
zero so a bad value never breaks a quote page, and a value with trailing
text ("12.50abc") keeps its leading number. Every fallback is logged, and
missing, truncated and malformed values are told apart.
"""

import json
import logging
import math
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Directory where statement-of-work JSON files live
SOW_DATA_DIR = Path(__file__).parent / "sow_data"

DEFAULT_HOURLY_RATE = 190.0

AMOUNT_FIELDS = [
    "surveyHours", "surveyCost",
    "installationHours", "installationCost",
    "configurationHours", "configurationCost",
    "laborHoldHours", "laborHoldCost",
    "removalHours", "removalCost",
    "hardwareCost", "hourlyRate", "totalCost",
]

# Where a resolved amount came from
SOURCE_VALUE = "value"
SOURCE_MISSING = "missing"
SOURCE_MALFORMED = "malformed"
SOURCE_TRUNCATED = "truncated"

# Decimal at the start of a string, the way form inputs are read ("12.50 USD" -> 12.50)
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_leading_number(raw) -> tuple[Optional[float], bool]:
    """
    Parse a number typed into a form field.

    Returns (number, exact). Strings are read up to the first character that
    cannot continue a decimal, so "12.50abc" gives (12.5, False). number is
    None when nothing numeric leads the value or the result is not finite.
    """
    if isinstance(raw, bool):
        return None, False
    if isinstance(raw, str):
        match = _LEADING_NUMBER.match(raw)
        if match is None:
            return None, False
        number = float(match.group(0))
        exact = not raw[match.end():].strip()
    else:
        try:
            number = float(raw)
        except (TypeError, ValueError):
            return None, False
        exact = True
    if not math.isfinite(number):
        return None, False
    return number, exact


def resolve_amount(quote: dict, field: str, default: float = 0.0) -> tuple[float, str]:
    """
    Read a numeric quote field.

    Returns (amount, source). source is "value" for a real number (zero
    included), "missing" when the field is absent, None or '', "truncated"
    when only a leading number could be read (that number is used), and
    "malformed" when nothing numeric leads the value, it is a boolean or it
    is not finite. Missing and malformed return the default.
    """
    raw = quote.get(field)
    if raw is None or raw == "":
        logger.debug("Quote %s: %s missing, using %s", quote.get("id"), field, default)
        return default, SOURCE_MISSING
    amount, exact = parse_leading_number(raw)
    if amount is None:
        logger.warning("Quote %s: %s is malformed (%r), using %s", quote.get("id"), field, raw, default)
        return default, SOURCE_MALFORMED
    if not exact:
        logger.warning("Quote %s: %s has trailing text (%r), using %s", quote.get("id"), field, raw, amount)
        return amount, SOURCE_TRUNCATED
    return amount, SOURCE_VALUE


def _resolve_all(quote: dict) -> tuple[dict, dict]:
    amounts = {}
    defaulted = {}
    for field in AMOUNT_FIELDS:
        default = DEFAULT_HOURLY_RATE if field == "hourlyRate" else 0.0
        amounts[field], source = resolve_amount(quote, field, default)
        if source != SOURCE_VALUE:
            defaulted[field] = source
    return amounts, defaulted


def _line(key: str, label: str, hours=None, rate=None, cost=None, included: bool = False) -> dict:
    return {
        "key": key,
        "label": label,
        "hours": hours,
        "rate": rate,
        "cost": cost,
        "included": included,
    }


def _select_lines(amounts: dict) -> list[dict]:
    rate = amounts["hourlyRate"]
    lines = []

    if amounts["surveyHours"] > 0:
        lines.append(_line("survey", "Site Survey & Planning",
                           amounts["surveyHours"], rate, amounts["surveyCost"]))

    lines.append(_line("installation", "Installation & Setup",
                       amounts["installationHours"], rate, amounts["installationCost"]))

    # Billed and included configuration are complementary on the same two fields
    if amounts["configurationHours"] > 0:
        if amounts["configurationCost"] > 0:
            lines.append(_line("configuration", "Configuration & Testing",
                               amounts["configurationHours"], rate, amounts["configurationCost"]))
        else:
            lines.append(_line("configuration_included", "Configuration & Testing",
                               amounts["configurationHours"], included=True))

    if amounts["removalCost"] > 0:
        lines.append(_line("removal", "Existing System Removal",
                           amounts["removalHours"], rate, amounts["removalCost"]))

    if amounts["laborHoldHours"] > 0 or amounts["laborHoldCost"] > 0:
        lines.append(_line("labor_hold", "Labor Hold, Final bill Return",
                           amounts["laborHoldHours"], rate, amounts["laborHoldCost"]))

    if amounts["hardwareCost"] > 0:
        lines.append(_line("hardware", "Hardware", cost=amounts["hardwareCost"]))

    lines.append(_line("training", "Documentation & Training", included=True))

    # Total is trusted as given, never re-summed from the rows above
    lines.append(_line("total", "Total Project Cost", cost=amounts["totalCost"]))
    return lines


def build_line_items(quote: dict) -> list[dict]:
    """Ordered line items to render for a quote."""
    amounts, _ = _resolve_all(quote)
    return _select_lines(amounts)


def select_statement_of_work(assessment: dict) -> Optional[str]:
    """
    Pick the statement-of-work key for an assessment. First match wins.

    fleet-tracking          -> fleet_tracking_obd
    fleet-camera            -> fleet_camera
    primary  + antenna      -> primary_with_antenna
    primary  + no antenna   -> primary_only
    failover + antenna      -> failover_with_antenna
    anything else           -> None
    """
    service_type = assessment.get("serviceType")
    usage = assessment.get("connectionUsage")
    has_antenna = assessment.get("lowSignalAntennaCable") == "yes"

    if service_type == "fleet-tracking":
        return "fleet_tracking_obd"
    if service_type == "fleet-camera":
        return "fleet_camera"
    if service_type == "site-assessment":
        if usage == "primary":
            return "primary_with_antenna" if has_antenna else "primary_only"
        if usage == "failover" and has_antenna:
            return "failover_with_antenna"
    return None


def build_quote_presentation(quote: dict, assessment: dict) -> dict:
    """Line items, statement-of-work key and the amounts that fell back to a default."""
    amounts, defaulted = _resolve_all(quote)
    return {
        "lineItems": _select_lines(amounts),
        "statementOfWorkKey": select_statement_of_work(assessment),
        "defaultedFields": defaulted,
    }


class StatementOfWorkLibrary:
    """Static statement-of-work text blocks, one JSON file per key."""

    def __init__(self, data_dir: Path = SOW_DATA_DIR):
        self.data_dir = data_dir
        self._cache: dict[str, dict] = {}

    def load(self, key: str) -> dict:
        """Load a statement of work by key. Cached after first load."""
        if key in self._cache:
            return self._cache[key]

        filepath = self.data_dir / f"{key}.json"
        if not filepath.exists():
            raise FileNotFoundError(f"No statement of work found for key: {key}")

        with open(filepath) as f:
            block = json.load(f)

        self._cache[key] = block
        return block

    def get(self, key: Optional[str]) -> Optional[dict]:
        """Like load(), but None in gives None out."""
        if key is None:
            return None
        return self.load(key)

    def list_available(self) -> list[str]:
        return sorted(p.stem for p in self.data_dir.glob("*.json"))


# Module-level library, shared by the routers
sow_library = StatementOfWorkLibrary()
