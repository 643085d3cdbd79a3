"""Printable HTML export of a reviewed profile.

The output is a standalone page meant for the browser's print dialog
("Save as PDF"); no PDF bytes are produced here.
"""

from datetime import date
from html import escape

from formfill.documents.models import ExtractedRecord

FIELD_LABELS: list[tuple[str, str]] = [
    ("name", "Name"),
    ("father_name", "Father's Name"),
    ("date_of_birth", "Date of Birth"),
    ("gender", "Gender"),
    ("address", "Address"),
    ("district", "District"),
    ("state", "State"),
    ("pincode", "Pincode"),
    ("aadhaar_number", "Aadhaar Number"),
    ("pan_number", "PAN Number"),
    ("voter_id_number", "Voter ID Number"),
    ("driving_license_number", "Driving License Number"),
]

_STYLE = """
    body { font-family: Arial, sans-serif; padding: 40px; max-width: 800px; margin: 0 auto; }
    h1 { color: #333; border-bottom: 2px solid #4f46e5; padding-bottom: 10px; }
    .field { display: flex; justify-content: space-between; padding: 12px 0; border-bottom: 1px solid #eee; }
    .label { color: #666; font-weight: 500; }
    .value { color: #333; font-weight: 600; text-align: right; max-width: 60%; }
    .header { text-align: center; margin-bottom: 30px; }
    .date { color: #888; font-size: 12px; margin-top: 5px; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #eee; text-align: center; color: #888; font-size: 12px; }
"""


def _display_value(field_name: str, value: object) -> str:
    text = str(value)
    return text.capitalize() if field_name == "gender" else text


def render_rows(record: ExtractedRecord) -> list[tuple[str, str]]:
    """Label/value pairs for every present field, in print order."""
    rows: list[tuple[str, str]] = []
    for field_name, label in FIELD_LABELS:
        value = getattr(record, field_name)
        if value is not None and str(value).strip():
            rows.append((label, _display_value(field_name, value)))
    return rows


def render_html(record: ExtractedRecord, generated_on: date | None = None) -> str:
    """Render the record as a printable HTML document.

    Args:
        record: Profile to print. Absent fields are omitted.
        generated_on: Date shown in the header. Defaults to today.

    Returns:
        A complete HTML document.
    """
    generated_on = generated_on or date.today()
    rows = "\n".join(
        f'    <div class="field"><span class="label">{escape(label)}</span>'
        f'<span class="value">{escape(value)}</span></div>'
        for label, value in render_rows(record)
    )
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '  <meta charset="utf-8">\n'
        "  <title>Extracted Document Information</title>\n"
        f"  <style>{_STYLE}  </style>\n"
        "</head>\n"
        "<body>\n"
        '  <div class="header">\n'
        "    <h1>Extracted Document Information</h1>\n"
        f'    <p class="date">Generated on: {generated_on.strftime("%A, %d %B %Y")}</p>\n'
        "  </div>\n"
        f"{rows}\n"
        '  <div class="footer">\n'
        "    <p>This document was generated by the Form Filling Assistant</p>\n"
        "  </div>\n"
        "</body>\n"
        "</html>\n"
    )
