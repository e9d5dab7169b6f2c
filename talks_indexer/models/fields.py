"""Dynamic field bags and the privacy rules applied to them.

Talks and speakers carry open-ended ``name -> value`` data from the submission
system. Upstream marks each field public or private; on top of that, anything
that looks like an email address is kept out of public documents.
"""

import copy
from datetime import datetime
from typing import Optional, Union

FieldValue = Union[bool, int, float, str, list[str], datetime]
FieldBag = dict[str, FieldValue]


def looks_like_email(value: str) -> bool:
    """Loose email check: text before '@', text after it, and a '.' after it.

    "a@b.c" and "x @ y.z" both match.
    """
    at_index = value.find("@")
    return 0 < at_index < len(value) - 1 and "." in value[at_index:]


def is_email_field(name: str, value: FieldValue) -> bool:
    """True if a field must never reach a public document."""
    if "email" in name.lower():
        return True
    return isinstance(value, str) and looks_like_email(value)


def filter_email_fields(data: Optional[FieldBag]) -> FieldBag:
    """Copy of ``data`` without email-named or email-valued fields."""
    if not data:
        return {}
    return {
        key: copy.deepcopy(value)
        for key, value in data.items()
        if not is_email_field(key, value)
    }


def merge_fields(data: Optional[FieldBag], private_data: Optional[FieldBag]) -> FieldBag:
    """Union of both bags; private values win when a key is in both."""
    merged: FieldBag = {}
    for bag in (data, private_data):
        for key, value in (bag or {}).items():
            merged[key] = copy.deepcopy(value)
    return merged


def serialize_fields(data: FieldBag) -> dict:
    """JSON-ready copy of a bag; timestamps become ISO-8601 strings."""
    return {
        key: value.isoformat() if isinstance(value, datetime) else copy.deepcopy(value)
        for key, value in data.items()
    }
