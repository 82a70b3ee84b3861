"""Pre-flight checks for video encode jobs.

Problems are reported, never corrected. Configuration mistakes raise
JobValidationError; a source that cannot be encoded as delivered raises
ProviderContentError so it can be routed back to the content provider.
"""

from __future__ import annotations

import logging

from mediaproc.encoder.profiles import get_encoder_profile
from mediaproc.errors import JobValidationError, ProviderContentError
from mediaproc.jobs.models import VideoEncodeJob

logger = logging.getLogger(__name__)


def validate_video_job(job: VideoEncodeJob) -> None:
    """Check a job before any encode starts.

    Raises:
        JobValidationError: Missing input or outputs, more than one input,
            unknown encoder, HDR source with a non-HDR encoder, unsupported
            color spec, or an output carrying a per-stream encoder.
        ProviderContentError: The source does not have exactly one video
            stream, or its video stream has no frame size.
    """
    if not job.inputs:
        raise JobValidationError("Video encoding job has no input media")
    if len(job.inputs) > 1:
        raise JobValidationError(
            f"Video encoding jobs may have only one input, not {len(job.inputs)}"
        )
    if not job.outputs:
        raise JobValidationError("Video encoding job has no output definitions")

    profile = get_encoder_profile(job.encoder)
    media = job.inputs[0]

    if media.has_hdr and not profile.supports_hdr:
        raise JobValidationError(
            f"{media.file_path} is HDR but encoder {profile.name} does not "
            "support HDR"
        )

    if not profile.supports_color_spec(job.color_spec):
        raise JobValidationError(
            f"Encoder {profile.name} does not support color spec "
            f"{job.color_spec.value}"
        )

    if media.video_stream_count != 1:
        raise ProviderContentError(
            "Video encoding job input may have only one video stream, "
            f"not {media.video_stream_count}",
            file_path=str(media.file_path),
        )

    stream = media.first_video_stream
    if stream is None or stream.width <= 0 or stream.height <= 0:
        size = "missing" if stream is None else f"{stream.width}x{stream.height}"
        raise ProviderContentError(
            f"Video stream of {media.file_path} has no usable frame size ({size})",
            file_path=str(media.file_path),
        )

    for output in job.outputs:
        if output.encoder is not None:
            raise JobValidationError(
                f"Output {output.output_file_name}: video encoding jobs do not "
                "support per-stream encoder overrides"
            )

    logger.debug(
        "Validated job for %s with %d output(s)", media.file_path, len(job.outputs)
    )
