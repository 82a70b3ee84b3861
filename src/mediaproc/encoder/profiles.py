"""Encoder backend profiles.

Each supported backend is described by an EncoderProfile: the ffmpeg
encoder it maps to, the private-options flag that carries its parameter
block, how fields in that block are joined, and whether it can carry HDR
mastering metadata. Backends are looked up by name in a registry so new
ones can be added without touching the derivation code.

Functions in this module:
- get_encoder_profile: Look up a registered profile by name
- register_encoder_profile: Add or replace a profile
- available_encoders: Names of registered profiles
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from mediaproc.errors import JobValidationError
from mediaproc.jobs.types import OutputColorSpec

logger = logging.getLogger(__name__)

X264 = "x264"
X265 = "x265"

# Color descriptions as x264/x265 fields
X26X_COLOR_FIELDS: dict[OutputColorSpec, tuple[str, ...]] = {
    OutputColorSpec.REC709: (
        "colorprim=bt709",
        "transfer=bt709",
        "colormatrix=bt709",
    ),
    OutputColorSpec.REC601: (
        "colorprim=smpte170m",
        "transfer=smpte170m",
        "colormatrix=smpte170m",
    ),
    OutputColorSpec.HDR10: (
        "colorprim=bt2020",
        "transfer=smpte2084",
        "colormatrix=bt2020nc",
    ),
}


@dataclass(frozen=True)
class EncoderProfile:
    """Description of one encoder backend."""

    name: str
    """Short name used in job definitions (e.g., 'x265')."""

    ffmpeg_encoder: str
    """ffmpeg -c:v value (e.g., 'libx265')."""

    params_flag: str
    """Flag carrying the parameter block (e.g., '-x265-params')."""

    supports_hdr: bool
    """Whether mastering display / light level metadata can be signalled."""

    field_separator: str = ":"
    """Separator between key=value fields in the parameter block."""

    color_fields: dict[OutputColorSpec, tuple[str, ...]] = field(
        default_factory=dict
    )
    """Fields emitted for each explicitly requested color spec."""

    def color_args(self, spec: OutputColorSpec) -> str:
        """Return the joined color fields for spec.

        Raises:
            JobValidationError: If this backend cannot produce spec.
        """
        fields = self.color_fields.get(spec)
        if fields is None:
            raise JobValidationError(
                f"Encoder {self.name} does not support color spec {spec.value}"
            )
        return self.field_separator.join(fields)

    def supports_color_spec(self, spec: OutputColorSpec) -> bool:
        return spec is OutputColorSpec.UNKNOWN or spec in self.color_fields


_registry: dict[str, EncoderProfile] = {
    X264: EncoderProfile(
        name=X264,
        ffmpeg_encoder="libx264",
        params_flag="-x264-params",
        supports_hdr=False,
        color_fields=X26X_COLOR_FIELDS,
    ),
    X265: EncoderProfile(
        name=X265,
        ffmpeg_encoder="libx265",
        params_flag="-x265-params",
        supports_hdr=True,
        color_fields=X26X_COLOR_FIELDS,
    ),
}
_registry_lock = threading.Lock()


def register_encoder_profile(profile: EncoderProfile) -> None:
    """Register a backend, replacing any profile with the same name."""
    with _registry_lock:
        if profile.name.casefold() in _registry:
            logger.debug("Replacing encoder profile %s", profile.name)
        _registry[profile.name.casefold()] = profile


def get_encoder_profile(name: str) -> EncoderProfile:
    """Look up a backend by name (case-insensitive).

    Raises:
        JobValidationError: If no backend is registered under name.
    """
    with _registry_lock:
        profile = _registry.get(name.casefold())
    if profile is None:
        raise JobValidationError(
            f"Unsupported encoder {name!r}; expected one of "
            f"{', '.join(available_encoders())}"
        )
    return profile


def available_encoders() -> list[str]:
    with _registry_lock:
        return sorted(_registry)
