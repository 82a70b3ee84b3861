"""Encoder parameter block derivation.

Builds the value of -x264-params / -x265-params for one pass of one
output. Fields, in order:

    bitrate, vbv-maxrate, vbv-bufsize, min-keyint, keyint, rc-lookahead,
    open-gop=0, scenecut=0 (unless allowed), pass, stats, color fields,
    HDR fields (when supported and present), raw overrides.

GOPs are closed and scene-cut keyframes are disabled by default so that
keyframes line up across every output of the job.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from mediaproc.domain.hdr import (
    ContentLightLevel,
    MasteringDisplayLuminance,
    MasteringDisplayPrimaries,
)
from mediaproc.encoder.profiles import EncoderProfile
from mediaproc.encoder.rules import EncodeContext, Rule, first_match
from mediaproc.jobs.types import OutputColorSpec

logger = logging.getLogger(__name__)

# Widths above this are assumed HD when guessing a color description
HD_WIDTH_THRESHOLD = 852

# SMPTE ST 2086 units: chromaticity in 0.00002, luminance in 0.0001 cd/m2
CHROMATICITY_SCALE = 50000
LUMINANCE_SCALE = 10000


def escape_param_value(value: str) -> str:
    """Escape a value for a colon-separated -x26x-params block.

    ffmpeg tokenizes the block with backslash escapes and single quotes, so
    Windows drive letters and separators must be escaped to stay one field.
    """
    return value.replace("\\", "\\\\").replace(":", "\\:").replace("'", "\\'")


def keyframe_interval(gop_seconds: int, frame_rate: float) -> int:
    """Frames per GOP, rounded to the nearest integer (ties to even)."""
    return round(gop_seconds * frame_rate)


def _probed_color_args(ctx: EncodeContext, profile: EncoderProfile) -> str:
    color = ctx.stream.color
    assert color is not None
    return profile.field_separator.join(
        (
            f"colorprim={color.primaries}",
            f"transfer={color.transfer}",
            f"colormatrix={color.matrix}",
        )
    )


def color_rules(profile: EncoderProfile) -> tuple[Rule[str], ...]:
    """Color description rules, highest priority first.

    HDR10 is only ever produced from an explicit job color spec.
    """
    return (
        Rule(
            "job_color_spec",
            lambda ctx: ctx.job.color_spec is not OutputColorSpec.UNKNOWN,
            lambda ctx: profile.color_args(ctx.job.color_spec),
        ),
        Rule(
            "probed",
            lambda ctx: ctx.stream.color is not None,
            lambda ctx: _probed_color_args(ctx, profile),
        ),
        Rule(
            "guess_hd",
            lambda ctx: ctx.stream.width > HD_WIDTH_THRESHOLD,
            lambda ctx: profile.color_args(OutputColorSpec.REC709),
        ),
        Rule(
            "guess_sd",
            lambda ctx: True,
            lambda ctx: profile.color_args(OutputColorSpec.REC601),
        ),
    )


def color_args(ctx: EncodeContext, profile: EncoderProfile) -> str:
    rule = first_match(color_rules(profile), ctx)
    assert rule is not None
    logger.debug("Color rule matched: %s", rule.name)
    return rule.result(ctx)


def _scaled(value: Decimal, scale: int) -> int:
    return round(value * scale)


def master_display_field(
    primaries: MasteringDisplayPrimaries,
    luminance: MasteringDisplayLuminance,
) -> str:
    """Format x265 master-display: G(x,y)B(x,y)R(x,y)WP(x,y)L(max,min)."""
    c = CHROMATICITY_SCALE
    return (
        "master-display="
        f"G({_scaled(primaries.gx, c)},{_scaled(primaries.gy, c)})"
        f"B({_scaled(primaries.bx, c)},{_scaled(primaries.by, c)})"
        f"R({_scaled(primaries.rx, c)},{_scaled(primaries.ry, c)})"
        f"WP({_scaled(primaries.wpx, c)},{_scaled(primaries.wpy, c)})"
        f"L({_scaled(luminance.max, LUMINANCE_SCALE)},"
        f"{_scaled(luminance.min, LUMINANCE_SCALE)})"
    )


def max_cll_field(light_level: ContentLightLevel) -> str:
    return f"max-cll={light_level.max_cll},{light_level.max_fall}"


def hdr_fields(ctx: EncodeContext, profile: EncoderProfile) -> list[str]:
    """HDR fields, empty unless the encoder and the job both support them."""
    job = ctx.job
    if not profile.supports_hdr:
        return []
    if job.mastering_primaries is None or job.mastering_luminance is None:
        return []
    fields = [master_display_field(job.mastering_primaries, job.mastering_luminance)]
    if job.light_level is not None:
        fields.append(max_cll_field(job.light_level))
    return fields


def build_encoder_params(
    ctx: EncodeContext,
    profile: EncoderProfile,
    pass_number: int,
) -> str:
    """Build the parameter block for one pass.

    Args:
        ctx: Source, job and output being encoded.
        profile: Target encoder backend.
        pass_number: 1-based pass index.

    Returns:
        The joined parameter block.
    """
    job, output = ctx.job, ctx.output
    keyint = keyframe_interval(job.gop_seconds, ctx.stream.frame_rate)

    fields = [
        f"bitrate={output.target_bitrate}",
        f"vbv-maxrate={output.peak_bitrate}",
        f"vbv-bufsize={output.vbv_buffer_size}",
        f"min-keyint={keyint}",
        f"keyint={keyint}",
        f"rc-lookahead={job.lookahead_frames}",
        "open-gop=0",
    ]
    if not output.allow_scene_detection:
        fields.append("scenecut=0")
    fields.append(f"pass={pass_number}")
    fields.append(f"stats={escape_param_value(str(job.stats_path(output)))}")
    fields.append(color_args(ctx, profile))
    fields.extend(hdr_fields(ctx, profile))
    fields.extend(output.encoder_overrides)

    return profile.field_separator.join(fields)
