# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""Named string-format predicates.

Each predicate takes a ``str`` and returns ``bool``. Predicates are looked up by
name so the failing format can be reported in ``Issue.params["format"]``.
"""

from __future__ import annotations

import datetime as _dt
import ipaddress
import re
from typing import Callable, Optional, Pattern
from urllib.parse import urlsplit

FormatPredicate = Callable[[str], bool]

EMAIL = re.compile(
    r"^(?!\.)(?!.*\.\.)([A-Za-z0-9_'+\-\.]*)[A-Za-z0-9_+-]@([A-Za-z0-9][A-Za-z0-9\-]*\.)+[A-Za-z]{2,}$"
)
# RFC 9562 variants, plus the nil and max UUIDs
UUID_ANY = re.compile(
    r"^(?:[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-8][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}"
    r"|00000000-0000-0000-0000-000000000000|ffffffff-ffff-ffff-ffff-ffffffffffff)$"
)
GUID = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
NANOID = re.compile(r"^[a-zA-Z0-9_-]{21}$")
CUID = re.compile(r"^[cC][^\s-]{8,}$")
CUID2 = re.compile(r"^[0-9a-z]+$")
ULID = re.compile(r"^[0-9A-HJKMNP-TV-Za-hjkmnp-tv-z]{26}$")
BASE64 = re.compile(r"^(?:[0-9a-zA-Z+/]{4})*(?:[0-9a-zA-Z+/]{2}==|[0-9a-zA-Z+/]{3}=)?$")
BASE64URL = re.compile(r"^[A-Za-z0-9_-]*$")
IPV4 = re.compile(
    r"^(?:(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])$"
)

# Extended_Pictographic and Emoji_Component, approximated by code point blocks
EMOJI = re.compile(
    "^(?:["
    "©®‼⁉™ℹ↔-↙↩↪⌚⌛⌨⏏"
    "⏩-⏳⏸-⏺Ⓜ▪▫▶◀◻-◾☀-➿"
    "⤴⤵⬅-⬇⬛⬜⭐⭕〰〽㊗㊙"
    "\U0001f000-\U0001faff\U0001fc00-\U0001fffd"
    "#*0-9\u200d\u20e3\ufe0f\U0001f1e6-\U0001f1ff\U0001f3fb-\U0001f3ff\U000e0020-\U000e007f"
    "])+$"
)
_EMOJI_COMPONENTS_ONLY = re.compile(r"^[#*0-9]+$")

_PREFIX = re.compile(r"[0-9]+")
_DATE = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")
_HHMM = r"(?:[01][0-9]|2[0-3]):[0-5][0-9]"


def is_email(value: str) -> bool:
    return EMAIL.fullmatch(value) is not None


def make_uuid(version: Optional[int] = None) -> FormatPredicate:
    if version is None:
        return lambda value: UUID_ANY.fullmatch(value) is not None
    if not 1 <= version <= 8:
        raise ValueError(f"Unsupported UUID version: {version}")
    pattern = re.compile(
        rf"^[0-9a-fA-F]{{8}}-[0-9a-fA-F]{{4}}-{version}[0-9a-fA-F]{{3}}-[89abAB][0-9a-fA-F]{{3}}-[0-9a-fA-F]{{12}}$"
    )
    return lambda value: pattern.fullmatch(value) is not None


def is_guid(value: str) -> bool:
    return GUID.fullmatch(value) is not None


def make_url(
    hostname: Optional[Pattern[str]] = None,
    protocol: Optional[Pattern[str]] = None,
) -> FormatPredicate:
    def predicate(value: str) -> bool:
        try:
            parts = urlsplit(value.strip())
            host = parts.hostname
        except ValueError:
            return False
        if not parts.scheme or not parts.netloc:
            return False
        if protocol is not None and not protocol.fullmatch(parts.scheme):
            return False
        if hostname is not None and not hostname.fullmatch(host or ""):
            return False
        return True

    return predicate


def is_emoji(value: str) -> bool:
    if EMOJI.fullmatch(value) is None:
        return False
    # digits and '#'/'*' are emoji components only when part of a keycap
    return _EMOJI_COMPONENTS_ONLY.fullmatch(value) is None


def is_base64(value: str) -> bool:
    return len(value) % 4 == 0 and BASE64.fullmatch(value) is not None


def is_base64url(value: str) -> bool:
    return BASE64URL.fullmatch(value) is not None and len(value) % 4 != 1


def is_nanoid(value: str) -> bool:
    return NANOID.fullmatch(value) is not None


def is_cuid(value: str) -> bool:
    return CUID.fullmatch(value) is not None


def is_cuid2(value: str) -> bool:
    return CUID2.fullmatch(value) is not None


def is_ulid(value: str) -> bool:
    return ULID.fullmatch(value) is not None


def is_ipv4(value: str) -> bool:
    return IPV4.fullmatch(value) is not None


def is_ipv6(value: str) -> bool:
    if "%" in value:
        return False
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def _is_cidr(value: str, address_ok: FormatPredicate, max_prefix: int) -> bool:
    address, sep, prefix = value.partition("/")
    if not sep or _PREFIX.fullmatch(prefix) is None or (len(prefix) > 1 and prefix.startswith("0")):
        return False
    return address_ok(address) and 0 <= int(prefix) <= max_prefix


def is_cidrv4(value: str) -> bool:
    return _is_cidr(value, is_ipv4, 32)


def is_cidrv6(value: str) -> bool:
    return _is_cidr(value, is_ipv6, 128)


def _valid_date(value: str) -> bool:
    match = _DATE.fullmatch(value)
    if match is None:
        return False
    year, month, day = (int(part) for part in match.groups())
    try:
        _dt.date(year, month, day)
    except ValueError:
        return False
    return True


def _time_source(precision: Optional[int]) -> str:
    if precision == -1:
        return _HHMM
    if precision is None:
        return rf"{_HHMM}(?::[0-5][0-9](?:\.[0-9]+)?)?"
    if precision == 0:
        return rf"{_HHMM}:[0-5][0-9]"
    return rf"{_HHMM}:[0-5][0-9]\.[0-9]{{{precision}}}"


def make_time(precision: Optional[int] = None) -> FormatPredicate:
    pattern = re.compile(rf"^{_time_source(precision)}$")
    return lambda value: pattern.fullmatch(value) is not None


def make_datetime(
    *,
    offset: bool = False,
    local: bool = False,
    precision: Optional[int] = None,
) -> FormatPredicate:
    """ISO 8601 datetime.

    ``Z`` is always accepted; ``offset`` also accepts ``+hh:mm`` offsets and
    ``local`` accepts a missing zone designator.
    """

    zones = ["Z"]
    if offset:
        zones.append(r"[+-](?:[01][0-9]|2[0-3]):?[0-5][0-9]")
    zone = "(?:" + "|".join(zones) + ")"
    if local:
        zone += "?"
    pattern = re.compile(rf"^{_time_source(precision)}{zone}$")

    def predicate(value: str) -> bool:
        date_part, sep, time_part = value.partition("T")
        if not sep:
            return False
        return _valid_date(date_part) and pattern.fullmatch(time_part) is not None

    return predicate


def is_date(value: str) -> bool:
    return _valid_date(value)


__all__ = [
    "FormatPredicate",
    "make_datetime",
    "make_time",
    "make_url",
    "make_uuid",
]
