"""Prompt text sent to the vision model for each extraction mode."""

from formfill.documents.models import DocumentClass

from .modes import ExtractionMode

_ENGLISH_RULE = (
    "CRITICAL: ALL extracted text MUST be in ENGLISH only. If the document "
    "contains text in Hindi, Marathi, or any other Indian regional language, "
    "you MUST transliterate/translate it to English."
)
_ENGLISH_REMINDER = (
    "IMPORTANT: Output ALL text in ENGLISH only - transliterate any "
    "Hindi/Marathi/regional text to English."
)
_JSON_ONLY = "Respond with a single JSON object and nothing else."

_SYSTEM_PROMPTS: dict[ExtractionMode, str] = {
    ExtractionMode.PAN_ONLY: (
        "You are an OCR assistant for Indian PAN cards. {english} Extract ONLY "
        "the PAN number and father's name. Return JSON: "
        '{{"panNumber": "...", "fatherName": "...", "confidence": 0.0-1.0}}'
    ),
    ExtractionMode.VOTER_ONLY: (
        "You are an OCR assistant for Indian Voter ID. {english} Extract ONLY "
        'the Voter ID number. Return JSON: {{"voterIdNumber": "...", '
        '"confidence": 0.0-1.0}}'
    ),
    ExtractionMode.DL_ONLY: (
        "You are an OCR assistant for Indian Driving Licenses. {english} "
        'Extract ONLY the DL number. Return JSON: {{"drivingLicenseNumber": '
        '"...", "confidence": 0.0-1.0}}'
    ),
    ExtractionMode.FULL: (
        "You are an OCR assistant for Indian government documents. {english} "
        "Extract personal information. IMPORTANT: Aadhaar must be exactly 12 "
        "digits (format: XXXX XXXX XXXX). Return JSON with: name, fatherName, "
        "dateOfBirth (YYYY-MM-DD), gender (male/female/other), address, "
        "district, state, pincode (6 digits), aadhaarNumber (12 digits), "
        "panNumber, voterIdNumber, drivingLicenseNumber, confidence."
    ),
}

_NARROW_USER_PROMPTS: dict[ExtractionMode, str] = {
    ExtractionMode.PAN_ONLY: (
        "Extract PAN number (10 chars) and complete father's name from this PAN card."
    ),
    ExtractionMode.VOTER_ONLY: "Extract the EPIC/Voter ID number from this Voter ID card.",
    ExtractionMode.DL_ONLY: "Extract the Driving License number from this document.",
}

_FULL_USER_PROMPTS: dict[DocumentClass, str] = {
    DocumentClass.AADHAAR: (
        "This is an Aadhaar Card. Extract ALL visible information. CRITICAL: "
        "The Aadhaar number MUST be exactly 12 digits (format: XXXX XXXX XXXX). "
        "Look for S/O, D/O, W/O, C/O for father's/husband's name. Extract full "
        "address from back side."
    ),
    DocumentClass.PAN: (
        "This is a PAN Card. Extract full name, father's name (complete), date "
        "of birth, and 10-character PAN number."
    ),
    DocumentClass.VOTER_ID: (
        "This is a Voter ID Card. Extract full name, father's name, date of "
        "birth, gender, address, and EPIC number."
    ),
    DocumentClass.DRIVING_LICENSE: (
        "This is a Driving License. Extract full name, father's name, date of "
        "birth, address, and DL number."
    ),
    DocumentClass.OTHER: (
        "This is an Indian government ID document. Extract all visible personal "
        "information including name, father's name, DOB, gender, address, and "
        "any ID numbers. Aadhaar must be exactly 12 digits."
    ),
}


def system_prompt(mode: ExtractionMode) -> str:
    """Instructions limiting the model to the fields of ``mode``."""
    return f"{_SYSTEM_PROMPTS[mode].format(english=_ENGLISH_RULE)} {_JSON_ONLY}"


def user_prompt(document_class: DocumentClass | str, mode: ExtractionMode) -> str:
    """Document-specific request accompanying the image.

    Narrow modes ignore the document class; a full scan of an unknown
    class uses the generic government-ID prompt.
    """
    if mode in _NARROW_USER_PROMPTS:
        text = _NARROW_USER_PROMPTS[mode]
    else:
        try:
            text = _FULL_USER_PROMPTS[DocumentClass(document_class)]
        except ValueError:
            text = _FULL_USER_PROMPTS[DocumentClass.OTHER]
    return f"{text} {_ENGLISH_REMINDER}"
