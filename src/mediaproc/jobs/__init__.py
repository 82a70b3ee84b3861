"""Encode job definitions and job file loading."""

from mediaproc.jobs.loader import load_video_job, load_video_job_from_dict
from mediaproc.jobs.models import OutputStreamDefinition, VideoEncodeJob
from mediaproc.jobs.types import (
    DeinterlaceOverride,
    EncodeSpeed,
    OutputColorSpec,
    PixelFormat,
    StreamRole,
)

__all__ = [
    "DeinterlaceOverride",
    "EncodeSpeed",
    "OutputColorSpec",
    "OutputStreamDefinition",
    "PixelFormat",
    "StreamRole",
    "VideoEncodeJob",
    "load_video_job",
    "load_video_job_from_dict",
]
