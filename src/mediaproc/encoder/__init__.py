"""Filter and encoder parameter derivation, and encode execution."""

from mediaproc.encoder.command import (
    EncodePass,
    EncodePlan,
    build_encode_plan,
    build_pass_args,
)
from mediaproc.encoder.executor import (
    EncodeResult,
    VideoEncoder,
    get_max_workers,
    plan_job,
)
from mediaproc.encoder.filters import derive_filter_chain, working_geometry
from mediaproc.encoder.params import build_encoder_params
from mediaproc.encoder.profiles import (
    X264,
    X265,
    EncoderProfile,
    available_encoders,
    get_encoder_profile,
    register_encoder_profile,
)
from mediaproc.encoder.rules import EncodeContext, Rule, first_match
from mediaproc.encoder.validation import validate_video_job

__all__ = [
    "X264",
    "X265",
    "EncodeContext",
    "EncodePass",
    "EncodePlan",
    "EncodeResult",
    "EncoderProfile",
    "Rule",
    "VideoEncoder",
    "available_encoders",
    "build_encode_plan",
    "build_encoder_params",
    "build_pass_args",
    "derive_filter_chain",
    "first_match",
    "get_encoder_profile",
    "get_max_workers",
    "plan_job",
    "register_encoder_profile",
    "validate_video_job",
    "working_geometry",
]
