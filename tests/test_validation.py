"""Tests for identifier sanitizers and validators."""

import pytest

from formfill.documents.models import ExtractedRecord
from formfill.validation.identifiers import (
    FieldValidation,
    FieldValidator,
    sanitize_aadhaar,
    sanitize_driving_license,
    sanitize_pan,
    sanitize_pincode,
    sanitize_voter_id,
    validate_aadhaar,
    validate_driving_license,
    validate_pan,
    validate_pincode,
    validate_voter_id,
)


class TestAadhaar:
    """Tests for Aadhaar sanitising and validation."""

    def test_sanitize_strips_letters(self) -> None:
        assert sanitize_aadhaar("1234a5678B9012") == "123456789012"
        assert sanitize_aadhaar("1234 5678") == "1234 5678"

    @pytest.mark.parametrize(
        "value", ["123456789012", "1234 5678 9012", "1234-5678-9012"]
    )
    def test_valid_formats_canonicalised(self, value: str) -> None:
        result = validate_aadhaar(value)
        assert result.is_valid is True
        assert result.canonical_form == "1234 5678 9012"

    def test_rejects_letters(self) -> None:
        result = validate_aadhaar("1234 5678 901A")
        assert result.is_valid is False
        assert result.error_message == "Aadhaar number should only contain digits"

    @pytest.mark.parametrize("value, found", [("12345678901", 11), ("1234567890123", 13)])
    def test_rejects_wrong_length(self, value: str, found: int) -> None:
        result = validate_aadhaar(value)
        assert result.is_valid is False
        assert f"found {found} digits" in (result.error_message or "")

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_is_required(self, value) -> None:
        result = validate_aadhaar(value)
        assert result.is_valid is False
        assert result.error_message == "Aadhaar number is required"


class TestPan:
    """Tests for PAN sanitising and validation."""

    def test_sanitize_uppercases_and_strips_spaces(self) -> None:
        assert sanitize_pan("abcde 1234 f") == "ABCDE1234F"

    def test_case_insensitive(self) -> None:
        result = validate_pan("abcde1234f")
        assert result.is_valid is True
        assert result.canonical_form == "ABCDE1234F"

    def test_interior_whitespace_removed(self) -> None:
        assert validate_pan(" ABCDE 1234 F ").canonical_form == "ABCDE1234F"

    @pytest.mark.parametrize("value", ["ABCD1234F", "ABCDE12345", "1BCDE1234F", "ABCDE1234FG"])
    def test_invalid(self, value: str) -> None:
        result = validate_pan(value)
        assert result.is_valid is False
        assert result.canonical_form is None
        assert "5 letters, 4 digits, 1 letter" in (result.error_message or "")

    def test_empty(self) -> None:
        assert validate_pan(None).error_message == "PAN number is required"


class TestDrivingLicense:
    """Tests for Driving License sanitising and validation."""

    def test_sanitize(self) -> None:
        assert sanitize_driving_license("mh 12 3456789012 3") == "MH1234567890123"

    def test_valid(self) -> None:
        result = validate_driving_license("mh1234567890123")
        assert result.is_valid is True
        assert result.canonical_form == "MH1234567890123"

    @pytest.mark.parametrize("value", ["MH123456789012", "M11234567890123", "MH-1234567890123"])
    def test_invalid(self, value: str) -> None:
        assert validate_driving_license(value).is_valid is False

    def test_empty(self) -> None:
        result = validate_driving_license("")
        assert result.error_message == "Driving License number is required"


class TestVoterId:
    """Tests for Voter ID sanitising and validation."""

    def test_sanitize(self) -> None:
        assert sanitize_voter_id("abc 1234567") == "ABC1234567"

    def test_valid(self) -> None:
        result = validate_voter_id("abc1234567")
        assert result.is_valid is True
        assert result.canonical_form == "ABC1234567"

    @pytest.mark.parametrize("value", ["AB12345678", "ABC123456", "ABCD1234567"])
    def test_invalid(self, value: str) -> None:
        result = validate_voter_id(value)
        assert result.is_valid is False
        assert "3 letters + 7 digits" in (result.error_message or "")


class TestPincode:
    """Tests for pincode sanitising and validation."""

    def test_sanitize_keeps_six_digits(self) -> None:
        assert sanitize_pincode("41a1-00123") == "411001"
        assert sanitize_pincode("4110") == "4110"

    def test_valid(self) -> None:
        result = validate_pincode("411001")
        assert result == FieldValidation(True, canonical_form="411001")

    def test_leading_zero_rejected(self) -> None:
        result = validate_pincode("011234")
        assert result.is_valid is False
        assert result.error_message == "Pincode cannot start with 0"

    def test_wrong_length(self) -> None:
        result = validate_pincode("41100")
        assert result.is_valid is False
        assert "found 5 digits" in (result.error_message or "")

    def test_empty(self) -> None:
        assert validate_pincode(None).error_message == "Pincode is required"


class TestFieldValidator:
    """Tests for the field-name keyed validator registry."""

    def setup_method(self) -> None:
        self.validator = FieldValidator()

    def test_field_names(self) -> None:
        assert set(self.validator.field_names) == {
            "aadhaar_number",
            "pan_number",
            "voter_id_number",
            "driving_license_number",
            "pincode",
        }

    def test_sanitize_dispatch(self) -> None:
        assert self.validator.sanitize("pan_number", "abcde1234f") == "ABCDE1234F"
        assert self.validator.sanitize("name", "Sita devi") == "Sita devi"

    def test_validate_unknown_field(self) -> None:
        with pytest.raises(KeyError):
            self.validator.validate("name", "Sita")

    def test_validate_record_only_present_fields(self) -> None:
        record = ExtractedRecord(name="Sita", pan_number="abcde1234f")
        report = self.validator.validate_record(record)
        assert report.all_valid is True
        assert list(report.results) == ["pan_number"]
        assert report.canonical == {"pan_number": "ABCDE1234F"}

    def test_validate_record_reports_errors(self) -> None:
        record = ExtractedRecord(aadhaar_number="12345", pincode="011234")
        report = self.validator.validate_record(record)
        assert report.all_valid is False
        assert set(report.errors) == {"aadhaar_number", "pincode"}
        assert report.canonical == {}

    def test_empty_record_is_valid(self) -> None:
        report = self.validator.validate_record(ExtractedRecord())
        assert report.all_valid is True
        assert report.results == {}
