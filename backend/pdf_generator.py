"""
PDF Quote Generator.

Renders a customer-facing quote document from a Quote and its Assessment.
Uses fpdf2 (pure Python, no system dependencies).

Sections:
1. Header + Quote number / dates
2. Customer Information
3. Service Summary
4. Pricing (same line items the quote page shows)
5. Statement of Work (when the service has one)
6. Notes + terms
"""

from datetime import datetime, timedelta

from fpdf import FPDF

from .quote_lines import build_line_items

# --- Service display names ---
SERVICE_TITLES = {
    "site-assessment": "Fixed Wireless Access",
    "fleet-tracking": "Fleet & Asset Tracking Device",
    "fleet-camera": "Fleet Camera Installation",
}

# The PDF spells the labor hold out for customers
PDF_LABELS = {
    "labor_hold": "Labor hold for possible overage, returned if unused in final billing",
}


def service_title(service_type: str) -> str:
    return SERVICE_TITLES.get(service_type or "site-assessment", SERVICE_TITLES["site-assessment"])


def generate_service_summary(assessment: dict) -> str:
    """
    Plain-language description of the job from the assessment fields.
    Template-based per service type. Used under the service title.
    """
    service_type = assessment.get("serviceType") or "site-assessment"
    parts = []

    if service_type in ("fleet-tracking", "fleet-camera"):
        vehicles = assessment.get("deviceCount")
        fleet_size = assessment.get("totalFleetSize")
        if vehicles:
            parts.append(f"{vehicles} vehicle(s) to be installed")
        if fleet_size:
            parts.append(f"out of a fleet of {fleet_size}")
        if assessment.get("buildingType"):
            parts.append(f"vehicle types: {assessment['buildingType']}")
        if service_type == "fleet-camera":
            cameras = assessment.get("cameraTypes") or []
            if cameras:
                parts.append(f"cameras: {', '.join(cameras)}")
            if assessment.get("existingSystemRemoval") == "yes":
                parts.append("includes removal of the existing system")
        return (", ".join(parts) + ".") if parts else "Fleet installation."

    routers = assessment.get("routerCount") or 1
    parts.append(f"{routers} cellular router(s)")
    usage = assessment.get("connectionUsage")
    if usage:
        parts.append(f"as {usage} internet connection")
    if assessment.get("buildingType"):
        parts.append(f"at a {assessment['buildingType']} site")
    if assessment.get("coverageArea"):
        parts.append(f"covering {assessment['coverageArea']:,} sq ft")
    summary = " ".join(parts[:2]) + (", " + ", ".join(parts[2:]) if len(parts) > 2 else "")

    extras = []
    if assessment.get("lowSignalAntennaCable") == "yes":
        extras.append("Includes antenna installation for low signal")
    if assessment.get("cableFootage"):
        extras.append(f"{assessment['cableFootage']} ft of cable")
    if extras:
        summary += ". " + ". ".join(extras)
    return summary + "."


def _fmt(amount) -> str:
    """Format a number as $X,XXX.XX"""
    try:
        return f"${float(amount):,.2f}"
    except (ValueError, TypeError):
        return "$0.00"


def _fmt_hrs(hours) -> str:
    """Format hours as X.X"""
    try:
        return f"{float(hours):.1f}"
    except (ValueError, TypeError):
        return "0.0"


def _safe(text: str) -> str:
    """Replace Unicode chars that can't be rendered by built-in PDF fonts (latin-1)."""
    if not text:
        return ""
    return (
        str(text)
        .replace("\u2022", "-")    # bullet
        .replace("\u2014", " - ")  # em dash
        .replace("\u2013", "-")    # en dash
        .replace("\u201c", '"')    # left double quote
        .replace("\u201d", '"')    # right double quote
        .replace("\u2018", "'")    # left single quote
        .replace("\u2019", "'")    # right single quote
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


def _parse_date(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


class QuotePDF(FPDF):
    """Quote document layout helpers."""

    def __init__(self, company_name="", company_info=""):
        super().__init__()
        self.company_name = company_name
        self.company_info = company_info
        self.set_auto_page_break(auto=True, margin=20)

    def header(self):
        pass  # Headers are drawn per section

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, f"{_safe(self.company_name)} - Page {self.page_no()}/{{nb}}", align="C")

    def section_header(self, title):
        """Render a section header bar."""
        self.set_font("Helvetica", "B", 11)
        self.set_fill_color(45, 55, 72)
        self.set_text_color(255, 255, 255)
        self.cell(0, 8, f"  {title}", fill=True, new_x="LMARGIN", new_y="NEXT")
        self.set_text_color(0, 0, 0)
        self.ln(2)

    def field(self, label, value):
        """Label: value row. Blank values are skipped."""
        if value in (None, ""):
            return
        self.set_font("Helvetica", "B", 9)
        self.cell(45, 5, _safe(f"{label}:"))
        self.set_font("Helvetica", "", 9)
        self.multi_cell(0, 5, _safe(value), new_x="LMARGIN", new_y="NEXT")

    def table_header(self, cols):
        """cols: [(label, width), ...]"""
        self.set_font("Helvetica", "B", 8)
        self.set_fill_color(240, 240, 240)
        for label, width in cols:
            align = "R" if label in ("Hours", "Rate", "Cost") else "L"
            self.cell(width, 6, label, border="B", fill=True, align=align)
        self.ln()

    def table_row(self, values, widths, bold=False):
        self.set_font("Helvetica", "B" if bold else "", 8)
        for i, (val, width) in enumerate(zip(values, widths)):
            self.cell(width, 5.5, _safe(val), align="L" if i == 0 else "R")
        self.ln()

    def bullet(self, text, width):
        self.set_font("Helvetica", "", 8)
        self.set_x(self.l_margin)
        self.multi_cell(width, 4.5, _safe(f"  - {text}"), new_x="LMARGIN", new_y="NEXT")


def _line_values(item: dict) -> list:
    label = PDF_LABELS.get(item["key"], item["label"])
    if item["key"] == "total":
        return [label, "", "", _fmt(item["cost"])]
    if item["included"]:
        hours = _fmt_hrs(item["hours"]) if item["hours"] else ""
        return [label, hours, "", "Included"]
    hours = _fmt_hrs(item["hours"]) if item["hours"] is not None else ""
    rate = f"{_fmt(item['rate'])}/hr" if item["rate"] is not None else ""
    return [label, hours, rate, _fmt(item["cost"])]


def generate_quote_pdf(
    quote: dict,
    assessment: dict,
    company: dict = None,
    statement_of_work: dict = None,
    valid_days: int = 30,
) -> bytes:
    """
    Generate a PDF quote document.

    Args:
        quote: Quote dict as the API emits it (camelCase, decimal strings)
        assessment: Assessment dict as the API emits it
        company: {"name", "email", "partner"} for the header
        statement_of_work: SOW block from the library, or None
        valid_days: validity window printed on the quote

    Returns:
        PDF bytes
    """
    company = company or {}
    company_name = company.get("name") or "Quote"
    info_parts = [p for p in [company.get("partner"), company.get("email")] if p]
    company_info = " | ".join(info_parts)

    pdf = QuotePDF(company_name=company_name, company_info=company_info)
    pdf.alias_nb_pages()
    pdf.add_page()
    pw = pdf.w - pdf.l_margin - pdf.r_margin  # printable width

    # ── SECTION 1: Header ──
    pdf.set_font("Helvetica", "B", 20)
    pdf.cell(0, 10, _safe(company_name), new_x="LMARGIN", new_y="NEXT")
    if company_info:
        pdf.set_font("Helvetica", "", 9)
        pdf.set_text_color(100, 100, 100)
        pdf.cell(0, 5, _safe(company_info), new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
    pdf.ln(4)

    created = _parse_date(quote.get("createdAt")) or datetime.utcnow()
    expires = _parse_date(quote.get("expiresAt")) or created + timedelta(days=valid_days)

    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 8, _safe(f"QUOTE #{quote.get('quoteNumber') or quote.get('id', '?')}"),
             new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 5, f"Date: {created.strftime('%B %d, %Y')}", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(0, 5, f"Valid until: {expires.strftime('%B %d, %Y')}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    # ── SECTION 2: Customer ──
    pdf.section_header("CUSTOMER INFORMATION")
    pdf.field("Company", assessment.get("customerCompanyName"))
    pdf.field("Contact", assessment.get("customerContactName"))
    pdf.field("Email", assessment.get("customerEmail"))
    pdf.field("Phone", assessment.get("customerPhone"))
    pdf.field("Site Address", assessment.get("siteAddress"))
    pdf.field("Industry", assessment.get("industry"))
    install_date = _parse_date(assessment.get("preferredInstallationDate"))
    if install_date:
        pdf.field("Preferred Install", install_date.strftime("%B %d, %Y"))
    pdf.field("Sales Executive", assessment.get("salesExecutiveName"))
    pdf.ln(3)

    # ── SECTION 3: Service ──
    pdf.section_header("SERVICE SUMMARY")
    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(0, 6, _safe(service_title(assessment.get("serviceType"))), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 9)
    pdf.multi_cell(0, 4.5, _safe(generate_service_summary(assessment)), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(3)

    # ── SECTION 4: Pricing ──
    pdf.section_header("PRICING")
    cols = [("Service Item", 100), ("Hours", 25), ("Rate", 30), ("Cost", 35)]
    widths = [c[1] for c in cols]
    pdf.table_header(cols)
    for item in build_line_items(quote):
        if item["key"] == "total":
            pdf.set_draw_color(200, 200, 200)
            pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
            pdf.ln(1)
            pdf.table_row(_line_values(item), widths, bold=True)
        else:
            pdf.table_row(_line_values(item), widths)
    pdf.ln(6)

    # ── SECTION 5: Statement of Work ──
    if statement_of_work:
        pdf.section_header("STATEMENT OF WORK")
        pdf.set_font("Helvetica", "B", 10)
        pdf.multi_cell(pw, 5, _safe(statement_of_work.get("title")), new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("Helvetica", "", 8)
        pdf.multi_cell(pw, 4.5, _safe(statement_of_work.get("intro")), new_x="LMARGIN", new_y="NEXT")
        if statement_of_work.get("materials"):
            pdf.ln(1)
            pdf.multi_cell(pw, 4.5, _safe(statement_of_work["materials"]), new_x="LMARGIN", new_y="NEXT")
        for section in statement_of_work.get("sections", []):
            pdf.ln(2)
            pdf.set_font("Helvetica", "B", 9)
            pdf.cell(pw, 5, _safe(section.get("heading")), new_x="LMARGIN", new_y="NEXT")
            for item in section.get("items", []):
                pdf.bullet(item, pw)
        for heading, key in (("Estimated Time", "estimated_time"), ("Labor Hold", "labor_hold")):
            if statement_of_work.get(key):
                pdf.ln(2)
                pdf.set_font("Helvetica", "B", 9)
                pdf.cell(pw, 5, heading, new_x="LMARGIN", new_y="NEXT")
                pdf.set_font("Helvetica", "", 8)
                pdf.multi_cell(pw, 4.5, _safe(statement_of_work[key]), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    # ── SECTION 6: Notes + terms ──
    notes = assessment.get("additionalNotes")
    if notes:
        pdf.section_header("ADDITIONAL NOTES")
        pdf.set_font("Helvetica", "", 9)
        pdf.multi_cell(pw, 4.5, _safe(notes), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    pdf.set_font("Helvetica", "I", 8)
    pdf.set_text_color(100, 100, 100)
    pdf.set_x(pdf.l_margin)
    pdf.cell(pw, 4, f"This quote is valid for {valid_days} days from the date above.",
             new_x="LMARGIN", new_y="NEXT")
    pdf.cell(pw, 4, "Hardware is provided by your Wireless Vendor unless listed above.",
             new_x="LMARGIN", new_y="NEXT")
    pdf.set_text_color(0, 0, 0)

    return bytes(pdf.output())
