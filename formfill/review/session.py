"""Review of a merged profile before export.

A ``ReviewSession`` keeps the merged record untouched as the reference for
what was auto-filled, and lets the user edit a working copy. Identifier
fields are sanitised on every edit and validated as soon as they hold a
value; submission is blocked while any identifier is invalid.
"""

from dataclasses import fields

from formfill.documents.models import ExtractedRecord, Gender
from formfill.merge.engine import MergeResult
from formfill.utils.logger import get_logger
from formfill.validation.identifiers import FieldValidator

logger = get_logger(__name__)

_EDITABLE_FIELDS = frozenset(f.name for f in fields(ExtractedRecord)) - {"confidence"}


class ReviewSession:
    """Editable working copy of a merged profile.

    Args:
        extracted: The merged record. It is copied, never modified.
        validator: Identifier sanitizers and validators.
    """

    def __init__(
        self, extracted: ExtractedRecord, validator: FieldValidator | None = None
    ) -> None:
        self._extracted = extracted.copy()
        self.working = extracted.copy()
        self.validator = validator or FieldValidator()
        self.errors: dict[str, str] = {}
        self.touched: set[str] = set()
        self.submitted = False

    @classmethod
    def from_merge(
        cls, result: MergeResult, validator: FieldValidator | None = None
    ) -> "ReviewSession":
        session = cls(result.extracted, validator)
        session.working = result.working.copy()
        return session

    @property
    def extracted(self) -> ExtractedRecord:
        """Copy of the merged record as it came out of extraction."""
        return self._extracted.copy()

    def is_auto_filled(self, field_name: str) -> bool:
        self._check_field(field_name)
        return getattr(self._extracted, field_name) is not None

    def edit(self, field_name: str, value: str | None) -> str | None:
        """Apply a user edit to the working record.

        Args:
            field_name: Record attribute to change.
            value: Raw input. Empty input clears the field.

        Returns:
            The stored value after sanitising.

        Raises:
            KeyError: If the field is not editable.
            ValueError: If ``gender`` is set to an unknown value.
        """
        self._check_field(field_name)
        processed = self.validator.sanitize(field_name, value) if value else value
        stored = processed or None

        if field_name == "gender" and stored is not None:
            stored = Gender(stored.strip().lower())

        setattr(self.working, field_name, stored)
        if stored is not None:
            self.touched.add(field_name)
        self.submitted = False

        if self.validator.validates(field_name):
            self._refresh_error(field_name, stored)
        return stored

    def submit(self) -> bool:
        """Validate identifier fields and canonicalise them.

        Returns:
            ``True`` if every present identifier is valid. The working record
            then holds canonical forms. ``False`` leaves it unchanged and
            records the errors.
        """
        report = self.validator.validate_record(self.working)
        if not report.all_valid:
            self.errors.update(report.errors)
            logger.info("Submit blocked by invalid fields: %s", sorted(report.errors))
            return False

        for field_name, canonical in report.canonical.items():
            setattr(self.working, field_name, canonical)
        self.errors.clear()
        self.submitted = True
        return True

    def _refresh_error(self, field_name: str, value: str | None) -> None:
        if not value:
            self.errors.pop(field_name, None)
            return
        result = self.validator.validate(field_name, value)
        if result.is_valid:
            self.errors.pop(field_name, None)
        else:
            self.errors[field_name] = result.error_message or "Invalid value"

    @staticmethod
    def _check_field(field_name: str) -> None:
        if field_name not in _EDITABLE_FIELDS:
            raise KeyError(f"Unknown field: {field_name}")
