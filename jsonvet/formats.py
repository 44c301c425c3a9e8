"""Checkers for the ``format`` keyword.

Only string instances are checked. Unknown formats are accepted; the compiler
logs them once.
"""

import datetime
import ipaddress
import re
from typing import Callable, Dict
from urllib.parse import urlparse

# RFC 3339 patterns
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_PATTERN = re.compile(r'^\d{2}:\d{2}:\d{2}(\.\d+)?([+-]\d{2}:\d{2}|[Zz])$')
DATETIME_PATTERN = re.compile(
    r'^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([+-]\d{2}:\d{2}|[Zz])$'
)
UUID_PATTERN = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+$')
HOSTNAME_LABEL = re.compile(r'^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$')
JSON_POINTER_PATTERN = re.compile(r'^(/([^/~]|~[01])*)*$')
RELATIVE_JSON_POINTER_PATTERN = re.compile(r'^\d+(#|(/([^/~]|~[01])*)*)$')


def _is_date(value: str) -> bool:
    if not DATE_PATTERN.match(value):
        return False
    try:
        datetime.date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_time(value: str) -> bool:
    if not TIME_PATTERN.match(value):
        return False
    hour, minute, second = (int(part) for part in value[:8].split(':'))
    return hour < 24 and minute < 60 and second <= 60


def _is_date_time(value: str) -> bool:
    if not DATETIME_PATTERN.match(value):
        return False
    return _is_date(value[:10]) and _is_time(value[11:])


def _is_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


def _is_hostname(value: str) -> bool:
    if not value or len(value) > 253:
        return False
    labels = value[:-1].split('.') if value.endswith('.') else value.split('.')
    return all(HOSTNAME_LABEL.match(label) for label in labels)


def _is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def _is_ipv6(value: str) -> bool:
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def _is_uri(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and ' ' not in value


def _is_uri_reference(value: str) -> bool:
    return ' ' not in value


def _is_regex(value: str) -> bool:
    try:
        re.compile(value)
    except re.error:
        return False
    return True


def _is_uuid(value: str) -> bool:
    return UUID_PATTERN.match(value) is not None


FORMAT_CHECKERS: Dict[str, Callable[[str], bool]] = {
    'date': _is_date,
    'time': _is_time,
    'date-time': _is_date_time,
    'email': _is_email,
    'idn-email': _is_email,
    'hostname': _is_hostname,
    'ipv4': _is_ipv4,
    'ipv6': _is_ipv6,
    'uri': _is_uri,
    'uri-reference': _is_uri_reference,
    'iri': _is_uri,
    'iri-reference': _is_uri_reference,
    'regex': _is_regex,
    'uuid': _is_uuid,
    'json-pointer': lambda value: JSON_POINTER_PATTERN.match(value) is not None,
    'relative-json-pointer': lambda value: RELATIVE_JSON_POINTER_PATTERN.match(value) is not None,
}


def is_known_format(name: str) -> bool:
    return name in FORMAT_CHECKERS


def check_format(name: str, value: str) -> bool:
    """Check a string against a named format; unknown formats always pass."""
    checker = FORMAT_CHECKERS.get(name)
    if checker is None:
        return True
    return checker(value)


def register_format(name: str, checker: Callable[[str], bool]) -> None:
    """Register or replace a format checker."""
    FORMAT_CHECKERS[name] = checker
