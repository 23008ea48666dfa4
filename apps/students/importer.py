"""
Row builder for the bulk student CSV import.

The first CSV line names the columns; each following line maps onto
those columns by position. Values are trimmed, dates are parsed from
ISO format and every other value is stored as given.
"""
from __future__ import annotations

from typing import Dict, List, Sequence

from django.utils.dateparse import parse_date

from .models import GENDER_CHOICES, Student

TEMPLATE_COLUMNS = (
    'full_name', 'gender', 'dob', 'phone', 'whatsapp_no', 'email',
    'class_section', 'section', 'father_name', 'father_qualification',
    'mother_name', 'mother_qualification', 'address', 'fee_category',
    'aadhar_no', 'blood_group', 'identification_mark', 'transport_route',
    'hostel_room',
)

REQUIRED_COLUMNS = ('full_name',)

GENDERS = {value.lower(): value for value, _label in GENDER_CHOICES}


class ImportFormatError(ValueError):
    """The CSV header cannot be mapped onto student fields"""
    pass


class ImportRowError(ValueError):
    """A single row could not be turned into a student"""
    pass


def normalize_header(name: str) -> str:
    return name.strip().lower().replace(' ', '_')


def template_csv() -> str:
    """Header line for the downloadable import template"""
    return ','.join(TEMPLATE_COLUMNS) + '\n'


class StudentRowBuilder:
    """
    Turns CSV rows into unsaved, active Student instances.

    Unknown columns are rejected up front; columns missing from the file
    take an empty default.
    """

    def __init__(self, headers: Sequence[str]):
        self.headers: List[str] = [normalize_header(h) for h in headers]

        unknown = [h for h in self.headers if h not in TEMPLATE_COLUMNS]
        if unknown:
            raise ImportFormatError(f"Unknown CSV columns: {', '.join(unknown)}")

        missing = [c for c in REQUIRED_COLUMNS if c not in self.headers]
        if missing:
            raise ImportFormatError(f"Missing required CSV columns: {', '.join(missing)}")

    def to_fields(self, values: Sequence[str]) -> Dict[str, object]:
        if len(values) > len(self.headers):
            raise ImportRowError(
                f"Expected at most {len(self.headers)} values, got {len(values)}"
            )

        fields: Dict[str, object] = {column: '' for column in TEMPLATE_COLUMNS}
        fields.update(zip(self.headers, (v.strip() for v in values)))

        if not fields['full_name']:
            raise ImportRowError("Missing full name")

        raw_dob = fields.pop('dob')
        fields['dob'] = None
        if raw_dob:
            try:
                fields['dob'] = parse_date(raw_dob)
            except ValueError:
                fields['dob'] = None
            if fields['dob'] is None:
                raise ImportRowError(f"Invalid date of birth: {raw_dob}")

        raw_gender = fields['gender']
        if raw_gender:
            try:
                fields['gender'] = GENDERS[raw_gender.lower()]
            except KeyError:
                raise ImportRowError(f"Invalid gender: {raw_gender}")

        return fields

    def build(self, values: Sequence[str]) -> Student:
        return Student(
            student_status=Student.Status.ACTIVE,
            created_via=Student.CreationMethod.IMPORT,
            **self.to_fields(values),
        )
