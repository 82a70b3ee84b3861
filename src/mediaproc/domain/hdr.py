"""HDR mastering metadata value objects.

MediaInfo reports static HDR metadata as human-readable strings:

- MasteringDisplay_ColorPrimaries:
  "R: x=0.680000 y=0.320000, G: x=0.265000 y=0.690000,
  B: x=0.150000 y=0.060000, White point: x=0.312700 y=0.329000"
  or a well-known name such as "Display P3".
- MasteringDisplay_Luminance: "min: 0.0050 cd/m2, max: 1000 cd/m2"
- MaxCLL / MaxFALL: "1000 cd/m2"

The parse functions in this module turn those strings into immutable
value objects; anything unparseable raises ProbeError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from mediaproc.errors import ProbeError

_COORD_PATTERN = re.compile(r"x\s*=\s*([0-9.]+)\s+y\s*=\s*([0-9.]+)")
_LUMINANCE_MIN_PATTERN = re.compile(r"min:\s*([0-9.]+)\s*cd/m2")
_LUMINANCE_MAX_PATTERN = re.compile(r"max:\s*([0-9.]+)\s*cd")
_LIGHT_LEVEL_PATTERN = re.compile(r"^\s*(\d+)\s*cd")


@dataclass(frozen=True)
class MasteringDisplayPrimaries:
    """Chromaticity coordinates of the mastering display (CIE 1931 xy)."""

    rx: Decimal
    ry: Decimal
    gx: Decimal
    gy: Decimal
    bx: Decimal
    by: Decimal
    wpx: Decimal
    wpy: Decimal


@dataclass(frozen=True)
class MasteringDisplayLuminance:
    """Mastering display luminance range in cd/m2 (nits)."""

    min: Decimal
    max: Decimal


@dataclass(frozen=True)
class ContentLightLevel:
    """CEA-861.3 content light level metadata in cd/m2."""

    max_cll: int
    max_fall: int


def _d65(
    rx: str, ry: str, gx: str, gy: str, bx: str, by: str
) -> MasteringDisplayPrimaries:
    return MasteringDisplayPrimaries(
        rx=Decimal(rx),
        ry=Decimal(ry),
        gx=Decimal(gx),
        gy=Decimal(gy),
        bx=Decimal(bx),
        by=Decimal(by),
        wpx=Decimal("0.3127"),
        wpy=Decimal("0.3290"),
    )


# Primaries MediaInfo reports by name instead of by coordinates.
NAMED_PRIMARIES: dict[str, MasteringDisplayPrimaries] = {
    "display p3": _d65("0.680", "0.320", "0.265", "0.690", "0.150", "0.060"),
    "bt.2020": _d65("0.708", "0.292", "0.170", "0.797", "0.131", "0.046"),
    "bt.709": _d65("0.640", "0.330", "0.300", "0.600", "0.150", "0.060"),
}


def _to_decimal(value: str, field: str, source: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ProbeError(f"Invalid {field} value {value!r} in {source!r}") from e


def parse_mastering_primaries(text: str) -> MasteringDisplayPrimaries:
    """Parse a MediaInfo mastering display primaries string.

    Args:
        text: Either four "x=.. y=.." groups in R, G, B, white point order,
            or a named primaries set (case-insensitive).

    Returns:
        Parsed primaries.

    Raises:
        ProbeError: If the string matches neither form.
    """
    named = NAMED_PRIMARIES.get(text.strip().casefold())
    if named is not None:
        return named

    groups = text.split(",")
    if len(groups) != 4:
        raise ProbeError(f"Unrecognized mastering display primaries: {text!r}")

    coords: list[Decimal] = []
    for group in groups:
        match = _COORD_PATTERN.search(group)
        if match is None:
            raise ProbeError(f"Unrecognized mastering display primaries: {text!r}")
        coords.append(_to_decimal(match.group(1), "x", text))
        coords.append(_to_decimal(match.group(2), "y", text))

    return MasteringDisplayPrimaries(*coords)


def parse_mastering_luminance(text: str) -> MasteringDisplayLuminance:
    """Parse a MediaInfo luminance string like "min: 0.0050 cd/m2, max: 1000 cd/m2"."""
    min_match = _LUMINANCE_MIN_PATTERN.search(text)
    max_match = _LUMINANCE_MAX_PATTERN.search(text)
    if min_match is None or max_match is None:
        raise ProbeError(f"Unrecognized mastering display luminance: {text!r}")
    return MasteringDisplayLuminance(
        min=_to_decimal(min_match.group(1), "min", text),
        max=_to_decimal(max_match.group(1), "max", text),
    )


def _parse_light_level(text: str) -> int:
    match = _LIGHT_LEVEL_PATTERN.match(text)
    if match is None:
        raise ProbeError(f"Unrecognized light level: {text!r}")
    return int(match.group(1))


def parse_content_light_level(max_cll: str, max_fall: str) -> ContentLightLevel:
    """Parse MaxCLL / MaxFALL strings like "1000 cd/m2"."""
    return ContentLightLevel(
        max_cll=_parse_light_level(max_cll),
        max_fall=_parse_light_level(max_fall),
    )
