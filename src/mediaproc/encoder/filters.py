"""Video filter chain derivation for one output stream.

The chain order is fixed: crop, deinterlace, scale, square pixels,
subtitle burn-in. Cropping must precede every scaling step, and
subtitles are burned last so they stay legible on small renditions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mediaproc.encoder.lookups import DEINTERLACE_OVERRIDE_FILTERS
from mediaproc.encoder.rules import EncodeContext, Rule, first_match
from mediaproc.filters import catalog
from mediaproc.filters.chain import FilterChain
from mediaproc.jobs.types import DeinterlaceOverride

logger = logging.getLogger(__name__)

# Deinterlacing only applies up to HD width and above film frame rates
DEINTERLACE_MAX_WIDTH = 1920
DEINTERLACE_MIN_FRAME_RATE = 24.0


@dataclass(frozen=True)
class WorkingGeometry:
    """Aspect-corrected picture size the scaler starts from."""

    width: int
    height: int


def round_up_even(value: int) -> int:
    return value if value % 2 == 0 else value + 1


def crop_applies(ctx: EncodeContext) -> bool:
    media = ctx.media
    return ctx.job.auto_crop and bool(media.crop_filter) and media.crop is not None


def working_geometry(ctx: EncodeContext) -> WorkingGeometry:
    """Square-pixel dimensions after the optional crop.

    Computed per output; the probe result is left untouched.
    """
    stream = ctx.stream
    par = stream.pixel_aspect_ratio
    if crop_applies(ctx):
        crop = ctx.media.crop
        assert crop is not None
        width, height = crop.x_extent, crop.y_extent
    else:
        width, height = stream.width, stream.height
    if par != 1:
        width = round(width * par)
    return WorkingGeometry(width=width, height=height)


DEINTERLACE_RULES: tuple[Rule[str], ...] = (
    Rule(
        "override",
        lambda ctx: ctx.job.deinterlace_override is not DeinterlaceOverride.NONE,
        lambda ctx: DEINTERLACE_OVERRIDE_FILTERS[ctx.job.deinterlace_override],
    ),
    Rule(
        "mixed_film_video",
        lambda ctx: ctx.media.is_mixed_film_video,
        lambda ctx: catalog.DEINT_VIDEO_BIAS,
    ),
    Rule(
        "pure_film",
        lambda ctx: ctx.media.is_pure_film,
        lambda ctx: catalog.DEINT_PURE_TELECINE,
    ),
    Rule(
        "pure_video",
        lambda ctx: ctx.media.is_pure_video,
        lambda ctx: catalog.DEINT_PURE_VIDEO_SD,
    ),
)


def deinterlace_filter(ctx: EncodeContext, geometry: WorkingGeometry) -> str | None:
    """Select a deinterlace filter, or None when none applies."""
    if not ctx.media.has_combing:
        return None
    if geometry.width > DEINTERLACE_MAX_WIDTH:
        return None
    if ctx.stream.frame_rate <= DEINTERLACE_MIN_FRAME_RATE:
        return None
    rule = first_match(DEINTERLACE_RULES, ctx)
    if rule is None:
        return None
    logger.debug("Deinterlace rule matched: %s", rule.name)
    return rule.result(ctx)


def scale_filters(ctx: EncodeContext, geometry: WorkingGeometry) -> list[str]:
    """Scaling steps for the output width (possibly none)."""
    job, output = ctx.job, ctx.output
    par = ctx.stream.pixel_aspect_ratio

    if job.has_match_dimensions:
        height = round_up_even(output.width * job.match_height // job.match_width)
        return [
            catalog.scale_match_filter(par == 1, job.match_width, job.match_height),
            catalog.scale_filter(output.width, height),
        ]

    if output.width != geometry.width or par != 1:
        height = round_up_even(output.width * geometry.height // geometry.width)
        return [catalog.scale_filter(output.width, height)]

    return []


def derive_filter_chain(ctx: EncodeContext) -> FilterChain:
    """Build the ordered filter chain for one output stream."""
    chain = FilterChain()

    if crop_applies(ctx):
        assert ctx.media.crop_filter is not None
        chain = chain.add(ctx.media.crop_filter)

    geometry = working_geometry(ctx)

    deint = deinterlace_filter(ctx, geometry)
    if deint is not None:
        chain = chain.add(deint)

    for expr in scale_filters(ctx, geometry):
        chain = chain.add(expr)

    chain = chain.add(catalog.SETSAR_SQUARE)

    if ctx.job.burn_subtitles:
        chain = chain.add(catalog.subtitle_burn_filter(ctx.job.burn_subtitles))

    return chain
