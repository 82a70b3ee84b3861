"""Job definition file loading.

This module loads YAML job files, validates them with the Pydantic models
in mediaproc.jobs.schema, and converts them to VideoEncodeJob instances.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mediaproc.domain.hdr import (
    parse_content_light_level,
    parse_mastering_luminance,
    parse_mastering_primaries,
)
from mediaproc.errors import JobValidationError, ProbeError
from mediaproc.jobs.models import OutputStreamDefinition, VideoEncodeJob
from mediaproc.jobs.schema import HdrModel, OutputModel, VideoJobModel

logger = logging.getLogger(__name__)


def load_video_job(job_path: Path) -> VideoEncodeJob:
    """Load and validate a video encode job from a YAML file.

    Relative output directories resolve against the job file's directory.

    Args:
        job_path: Path to the YAML job file.

    Returns:
        VideoEncodeJob with outputs attached and no input media.

    Raises:
        JobValidationError: If the job file is invalid.
        FileNotFoundError: If the job file does not exist.
    """
    if not job_path.exists():
        raise FileNotFoundError(f"Job file not found: {job_path}")

    try:
        with open(job_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise JobValidationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise JobValidationError("Job file is empty")

    if not isinstance(data, dict):
        raise JobValidationError("Job file must be a YAML mapping")

    job = load_video_job_from_dict(data)
    if not job.output_dir.is_absolute():
        job.output_dir = job_path.parent / job.output_dir
    logger.debug("Loaded job %s with %d output(s)", job_path, len(job.outputs))
    return job


def load_video_job_from_dict(data: dict[str, Any]) -> VideoEncodeJob:
    """Validate a job mapping and convert it to a VideoEncodeJob.

    Raises:
        JobValidationError: If the job data is invalid.
    """
    try:
        model = VideoJobModel.model_validate(data)
    except ValidationError as e:
        raise JobValidationError(_format_validation_error(e)) from e

    return _convert_to_job(model)


def _format_validation_error(error: ValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Job validation failed: {loc}: {msg}"
        return f"Job validation failed: {msg}"
    return f"Job validation failed: {error}"


def _convert_output(model: OutputModel) -> OutputStreamDefinition:
    return OutputStreamDefinition(
        width=model.width,
        target_bitrate=model.target_bitrate,
        peak_bitrate=model.peak_bitrate,
        vbv_buffer_size=model.vbv_buffer_size,
        output_file_name=model.output_file_name,
        passes=model.passes,
        allow_scene_detection=model.allow_scene_detection,
        encoder_overrides=tuple(model.encoder_overrides),
        role=model.role,
        stream_name=model.stream_name,
        encoder=model.encoder,
    )


def _apply_hdr(job: VideoEncodeJob, hdr: HdrModel) -> None:
    try:
        job.mastering_primaries = parse_mastering_primaries(hdr.mastering_primaries)
        job.mastering_luminance = parse_mastering_luminance(hdr.mastering_luminance)
        if hdr.max_cll is not None and hdr.max_fall is not None:
            job.light_level = parse_content_light_level(hdr.max_cll, hdr.max_fall)
    except ProbeError as e:
        raise JobValidationError(f"Job validation failed: hdr: {e}") from e


def _convert_to_job(model: VideoJobModel) -> VideoEncodeJob:
    job = VideoEncodeJob(
        language=model.language,
        output_dir=Path(model.output_dir).expanduser(),
        encoder=model.encoder,
        color_spec=model.color_spec,
        speed=model.speed,
        pixel_format=model.pixel_format,
        deinterlace_override=model.deinterlace_override,
        auto_crop=model.auto_crop,
        gop_seconds=model.gop_seconds,
        lookahead_frames=model.lookahead_frames,
        burn_subtitles=model.burn_subtitles,
    )
    if model.match is not None:
        job.match_width = model.match.width
        job.match_height = model.match.height
        job.match_rate = model.match.rate
    if model.hdr is not None:
        _apply_hdr(job, model.hdr)
    for output in model.outputs:
        job.add_output(_convert_output(output))
    return job
