"""ffmpeg command assembly for video encode passes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mediaproc.encoder.filters import derive_filter_chain
from mediaproc.encoder.lookups import PRESET_NAMES
from mediaproc.encoder.params import build_encoder_params
from mediaproc.encoder.profiles import EncoderProfile
from mediaproc.encoder.rules import EncodeContext
from mediaproc.filters.chain import FilterChain

# Generous probe size so unusual streams (e.g. SMPTE 302M audio) are detected
PROBE_SIZE = "50000000"

# MPEG program/transport streams need generated timestamps
MPEG_EXTENSIONS = frozenset({".mpg", ".mpeg", ".ts", ".m2ts"})


@dataclass(frozen=True)
class EncodePass:
    """One ffmpeg invocation of a multi-pass encode."""

    pass_number: int
    total_passes: int
    args: tuple[str, ...]


@dataclass(frozen=True)
class EncodePlan:
    """Everything needed to produce one output stream."""

    output_path: Path
    filter_chain: FilterChain
    passes: tuple[EncodePass, ...]


def format_frame_rate(rate: float) -> str:
    """Format a frame rate for -r ("25", "23.976024")."""
    text = f"{rate:.6f}".rstrip("0").rstrip(".")
    return text or "0"


def global_args(input_path: Path) -> list[str]:
    args = ["-hide_banner", "-probesize", PROBE_SIZE]
    if input_path.suffix.lower() in MPEG_EXTENSIONS:
        args.extend(["-fflags", "+genpts"])
    args.append("-y")
    return args


def build_pass_args(
    ctx: EncodeContext,
    profile: EncoderProfile,
    chain: FilterChain,
    pass_number: int,
) -> list[str]:
    """Build ffmpeg arguments (without the executable) for one pass."""
    job, stream = ctx.job, ctx.stream
    input_path = Path(ctx.media.file_path)

    args = global_args(input_path)
    args.extend(["-i", str(input_path)])

    graph = chain.video_filters()
    if graph:
        args.extend(["-vf", graph])

    args.extend(
        [
            "-pix_fmt",
            job.pixel_format.value,
            "-preset",
            PRESET_NAMES[job.speed],
            "-an",
            "-c:v",
            profile.ffmpeg_encoder,
            "-metadata:s:v:0",
            f"language={job.language}",
        ]
    )

    if stream.frame_rate > 0:
        rate = job.match_rate if job.match_rate else stream.frame_rate
        args.extend(["-r", format_frame_rate(rate)])

    args.extend(
        [
            profile.params_flag,
            build_encoder_params(ctx, profile, pass_number),
            str(job.output_path(ctx.output)),
        ]
    )
    return args


def build_encode_plan(ctx: EncodeContext, profile: EncoderProfile) -> EncodePlan:
    """Derive the filter chain once and build every pass of one output."""
    chain = derive_filter_chain(ctx)
    total = ctx.output.passes
    passes = tuple(
        EncodePass(
            pass_number=n,
            total_passes=total,
            args=tuple(build_pass_args(ctx, profile, chain, n)),
        )
        for n in range(1, total + 1)
    )
    return EncodePlan(
        output_path=ctx.job.output_path(ctx.output),
        filter_chain=chain,
        passes=passes,
    )
