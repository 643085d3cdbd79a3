"""Sanitizers and validators for identity-number fields.

Each identifier field has a sanitizer, applied to every keystroke, and a
validator, applied on blur or submit. Validators never raise: they return
a ``FieldValidation`` carrying the canonical form or a readable error.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from formfill.documents.models import ExtractedRecord
from formfill.utils.logger import get_logger

logger = get_logger(__name__)

_PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]{1}$")
_DRIVING_LICENSE_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{13}$")
_VOTER_ID_PATTERN = re.compile(r"^[A-Z]{3}[0-9]{7}$")
_LETTERS = re.compile(r"[a-zA-Z]")
_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s")


@dataclass
class FieldValidation:
    """Outcome of validating a single field value."""

    is_valid: bool
    canonical_form: str | None = None
    error_message: str | None = None


def sanitize_aadhaar(value: str) -> str:
    """Drop letters typed into an Aadhaar field."""
    return _LETTERS.sub("", value)


def validate_aadhaar(value: str | None) -> FieldValidation:
    """Check for exactly 12 digits and format as ``XXXX XXXX XXXX``."""
    if not value:
        return FieldValidation(False, error_message="Aadhaar number is required")

    # Pasted text can bypass the keystroke sanitizer.
    if _LETTERS.search(value):
        return FieldValidation(
            False, error_message="Aadhaar number should only contain digits"
        )

    digits = _NON_DIGITS.sub("", value)
    if len(digits) != 12:
        return FieldValidation(
            False,
            error_message=(
                f"Aadhaar number must be exactly 12 digits (found {len(digits)} digits)"
            ),
        )

    return FieldValidation(True, canonical_form=f"{digits[:4]} {digits[4:8]} {digits[8:]}")


def _upper_compact(value: str) -> str:
    return _WHITESPACE.sub("", value.upper())


def sanitize_pan(value: str) -> str:
    return _upper_compact(value)


def validate_pan(value: str | None) -> FieldValidation:
    """PAN: five letters, four digits, one letter."""
    if not value:
        return FieldValidation(False, error_message="PAN number is required")
    cleaned = _upper_compact(value)
    if not _PAN_PATTERN.match(cleaned):
        return FieldValidation(
            False,
            error_message="PAN must be 5 letters, 4 digits, 1 letter (e.g., ABCDE1234F)",
        )
    return FieldValidation(True, canonical_form=cleaned)


def sanitize_driving_license(value: str) -> str:
    return _upper_compact(value)


def validate_driving_license(value: str | None) -> FieldValidation:
    """Driving License: two-letter state code followed by 13 digits."""
    if not value:
        return FieldValidation(
            False, error_message="Driving License number is required"
        )
    cleaned = _upper_compact(value)
    if not _DRIVING_LICENSE_PATTERN.match(cleaned):
        return FieldValidation(
            False,
            error_message="DL must be 2 letters + 13 digits (e.g., MH1234567890123)",
        )
    return FieldValidation(True, canonical_form=cleaned)


def sanitize_voter_id(value: str) -> str:
    return _upper_compact(value)


def validate_voter_id(value: str | None) -> FieldValidation:
    """Voter ID (EPIC): three letters followed by 7 digits."""
    if not value:
        return FieldValidation(False, error_message="Voter ID number is required")
    cleaned = _upper_compact(value)
    if not _VOTER_ID_PATTERN.match(cleaned):
        return FieldValidation(
            False,
            error_message="Voter ID must be 3 letters + 7 digits (e.g., ABC1234567)",
        )
    return FieldValidation(True, canonical_form=cleaned)


def sanitize_pincode(value: str) -> str:
    """Keep digits only, at most six of them."""
    return _NON_DIGITS.sub("", value)[:6]


def validate_pincode(value: str | None) -> FieldValidation:
    if not value:
        return FieldValidation(False, error_message="Pincode is required")
    digits = _NON_DIGITS.sub("", value)
    if len(digits) != 6:
        return FieldValidation(
            False,
            error_message=f"Pincode must be exactly 6 digits (found {len(digits)} digits)",
        )
    if digits.startswith("0"):
        return FieldValidation(False, error_message="Pincode cannot start with 0")
    return FieldValidation(True, canonical_form=digits)


@dataclass
class ValidationReport:
    """Aggregated validation of every present identifier field in a record."""

    all_valid: bool
    results: dict[str, FieldValidation]
    canonical: dict[str, str] = field(default_factory=dict)

    @property
    def errors(self) -> dict[str, str]:
        return {
            name: result.error_message or "Invalid value"
            for name, result in self.results.items()
            if not result.is_valid
        }


class FieldValidator:
    """Registry of sanitizer/validator pairs keyed by record field name."""

    def __init__(self) -> None:
        self._rules: dict[
            str, tuple[Callable[[str], str], Callable[[str | None], FieldValidation]]
        ] = {
            "aadhaar_number": (sanitize_aadhaar, validate_aadhaar),
            "pan_number": (sanitize_pan, validate_pan),
            "voter_id_number": (sanitize_voter_id, validate_voter_id),
            "driving_license_number": (
                sanitize_driving_license,
                validate_driving_license,
            ),
            "pincode": (sanitize_pincode, validate_pincode),
        }

    @property
    def field_names(self) -> list[str]:
        return list(self._rules)

    def validates(self, field_name: str) -> bool:
        return field_name in self._rules

    def sanitize(self, field_name: str, value: str) -> str:
        """Apply the field's keystroke sanitizer; other fields pass through."""
        rule = self._rules.get(field_name)
        return rule[0](value) if rule else value

    def validate(self, field_name: str, value: str | None) -> FieldValidation:
        """Validate a value for an identifier field.

        Raises:
            KeyError: If the field has no validator.
        """
        if field_name not in self._rules:
            raise KeyError(f"No validator for field: {field_name}")
        return self._rules[field_name][1](value)

    def validate_record(self, record: ExtractedRecord) -> ValidationReport:
        """Validate the identifier fields of a record that hold a value."""
        results: dict[str, FieldValidation] = {}
        canonical: dict[str, str] = {}

        for field_name in self._rules:
            value = getattr(record, field_name)
            if not value:
                continue
            result = self.validate(field_name, value)
            results[field_name] = result
            if result.is_valid and result.canonical_form is not None:
                canonical[field_name] = result.canonical_form

        all_valid = all(r.is_valid for r in results.values())
        logger.debug(
            "Record validation %s (%d fields checked)",
            "PASSED" if all_valid else "FAILED",
            len(results),
        )
        return ValidationReport(all_valid=all_valid, results=results, canonical=canonical)
