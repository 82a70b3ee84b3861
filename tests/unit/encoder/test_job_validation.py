"""Unit tests for video job pre-flight validation."""

from __future__ import annotations

import pytest

from mediaproc.encoder.validation import validate_video_job
from mediaproc.errors import JobValidationError, ProviderContentError
from mediaproc.jobs.types import OutputColorSpec


@pytest.fixture
def ready_job(make_job, make_media, make_output):
    """Return a job factory with one input and one output attached."""

    def _make(media=None, output=None, **job_fields):
        job = make_job(**job_fields)
        job.inputs.append(media if media is not None else make_media())
        job.add_output(output if output is not None else make_output())
        return job

    return _make


class TestValidateVideoJob:
    """Tests for validate_video_job."""

    def test_valid_job(self, ready_job) -> None:
        validate_video_job(ready_job())

    def test_no_input(self, make_job, make_output) -> None:
        job = make_job()
        job.add_output(make_output())
        with pytest.raises(JobValidationError, match="no input"):
            validate_video_job(job)

    def test_two_inputs(self, ready_job, make_media) -> None:
        job = ready_job()
        job.inputs.append(make_media())
        with pytest.raises(JobValidationError, match="only one input"):
            validate_video_job(job)

    def test_no_outputs(self, make_job, make_media) -> None:
        job = make_job()
        job.add_input_media(make_media())
        with pytest.raises(JobValidationError, match="no output"):
            validate_video_job(job)

    def test_unknown_encoder(self, ready_job) -> None:
        with pytest.raises(JobValidationError, match="Unsupported encoder"):
            validate_video_job(ready_job(encoder="vp9"))

    def test_hdr_source_needs_hdr_encoder(self, ready_job, make_media) -> None:
        job = ready_job(media=make_media(has_hdr=True), encoder="x264")
        with pytest.raises(JobValidationError, match="does not support HDR"):
            validate_video_job(job)

    def test_hdr_source_with_x265(self, ready_job, make_media) -> None:
        validate_video_job(ready_job(media=make_media(has_hdr=True), encoder="x265"))

    def test_dolby_vision_rejected(self, ready_job) -> None:
        job = ready_job(encoder="x265", color_spec=OutputColorSpec.DOLBY_VISION)
        with pytest.raises(JobValidationError, match="dolby_vision"):
            validate_video_job(job)

    def test_multiple_video_streams_is_provider_error(
        self, ready_job, make_media
    ) -> None:
        media = make_media(video_stream_count=2, file_path="/media/in/bad.mov")
        with pytest.raises(ProviderContentError) as exc_info:
            validate_video_job(ready_job(media=media))
        assert exc_info.value.file_path == "/media/in/bad.mov"

    def test_no_video_stream_is_provider_error(self, ready_job, make_media) -> None:
        media = make_media(video_stream_count=0, first_video_index=None)
        with pytest.raises(ProviderContentError):
            validate_video_job(ready_job(media=media))

    @pytest.mark.parametrize("size", [{"width": 0}, {"height": 0}])
    def test_zero_frame_size_is_provider_error(
        self, ready_job, make_media, make_video_stream, size
    ) -> None:
        media = make_media(
            stream=make_video_stream(**size), file_path="/media/in/nosize.mov"
        )
        with pytest.raises(ProviderContentError, match="frame size") as exc_info:
            validate_video_job(ready_job(media=media))
        assert exc_info.value.file_path == "/media/in/nosize.mov"

    def test_video_index_without_stream_is_provider_error(
        self, ready_job, make_media
    ) -> None:
        media = make_media(first_video_index=7)
        with pytest.raises(ProviderContentError, match="missing"):
            validate_video_job(ready_job(media=media))

    def test_per_stream_encoder_rejected(self, ready_job, make_output) -> None:
        job = ready_job(output=make_output(encoder="x265"))
        with pytest.raises(JobValidationError, match="per-stream encoder"):
            validate_video_job(job)

    def test_validation_does_not_modify_job(self, ready_job) -> None:
        job = ready_job()
        before = (list(job.inputs), list(job.outputs), job.color_spec)
        validate_video_job(job)
        assert (job.inputs, job.outputs, job.color_spec) == before
