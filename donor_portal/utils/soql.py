"""
SOQL Query Construction

Builds SOQL filter expressions from templates with every value rendered as
an escaped literal, so request data can never change the query structure.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any

# Characters that must be backslash-escaped inside a SOQL string literal
_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

_SALESFORCE_ID = re.compile(r"^[a-zA-Z0-9]{15}(?:[a-zA-Z0-9]{3})?$")


def escape(value: str) -> str:
    """Escape a string for use inside single quotes in SOQL."""
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def quote(value: Any) -> str:
    """
    Render a Python value as a SOQL literal.

    Strings are quoted and escaped, booleans become true/false, None becomes
    null, dates use ISO format. Floats are written in plain decimal notation.

    Raises:
        ValueError: For NaN or infinite floats
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"{value!r} has no SOQL literal")
        return format(Decimal(repr(value)), "f")
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    if isinstance(value, date):
        return value.isoformat()
    return f"'{escape(str(value))}'"


def build_soql(template: str, **params: Any) -> str:
    """
    Fill a SOQL template whose placeholders are ``{name}``.

    Example:
        build_soql("SELECT Id FROM Contact WHERE Email = {email}", email=email)
    """
    return template.format(**{name: quote(value) for name, value in params.items()})


def is_salesforce_id(value: Any) -> bool:
    """Check for a 15 or 18 character Salesforce record id."""
    return isinstance(value, str) and bool(_SALESFORCE_ID.match(value))
