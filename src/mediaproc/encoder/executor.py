"""Video encode execution.

VideoEncoder validates a job, plans every output, and runs the outputs
concurrently on a thread pool. The passes of a single output run in
sequence because later passes read the statistics file of earlier ones.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from mediaproc.core.process import ProcessRunner
from mediaproc.encoder.command import EncodePlan, build_encode_plan
from mediaproc.encoder.profiles import get_encoder_profile
from mediaproc.encoder.rules import EncodeContext
from mediaproc.encoder.validation import validate_video_job
from mediaproc.jobs.models import OutputStreamDefinition, VideoEncodeJob
from mediaproc.logging import pass_context, worker_context
from mediaproc.tools.progress import ProgressLogger

logger = logging.getLogger(__name__)


def get_max_workers() -> int:
    """Calculate maximum worker count (half CPU cores, minimum 1)."""
    cpu_count = os.cpu_count() or 2
    return max(1, cpu_count // 2)


@dataclass(frozen=True)
class EncodeResult:
    """Outcome of one output stream."""

    output: OutputStreamDefinition
    output_path: Path
    passes_run: int


def plan_job(job: VideoEncodeJob) -> list[tuple[OutputStreamDefinition, EncodePlan]]:
    """Validate job and build the plan for each output, in output order.

    Planning is pure: identical jobs yield identical plans.

    Raises:
        JobValidationError: If the job is misconfigured.
        ProviderContentError: If the source cannot be encoded as delivered.
    """
    validate_video_job(job)
    media = job.input_media
    stream = media.require_video_stream()
    profile = get_encoder_profile(job.encoder)

    plans = []
    for output in job.outputs:
        ctx = EncodeContext(media=media, stream=stream, job=job, output=output)
        plans.append((output, build_encode_plan(ctx, profile)))
    return plans


class VideoEncoder:
    """Runs video encode jobs through ffmpeg.

    Args:
        runner: Process runner used for every pass.
        ffmpeg_path: ffmpeg executable.
        env: Environment overlay for every ffmpeg call (e.g. fontconfig).
        max_workers: Concurrent outputs; defaults to get_max_workers().
    """

    def __init__(
        self,
        runner: ProcessRunner,
        ffmpeg_path: Path | str,
        env: Mapping[str, str] | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._runner = runner
        self._ffmpeg_path = ffmpeg_path
        self._env = dict(env) if env else None
        self._max_workers = max_workers or get_max_workers()

    def _encode_output(
        self,
        plan: EncodePlan,
        duration: float,
        worker_id: str,
        output_id: str,
    ) -> int:
        with worker_context(worker_id, output_id, plan.output_path):
            for encode_pass in plan.passes:
                label = f"Pass {encode_pass.pass_number}/{encode_pass.total_passes}"
                with pass_context(encode_pass.pass_number, encode_pass.total_passes):
                    logger.info("Starting encode %s -> %s", label, plan.output_path)
                    self._runner.run_streaming(
                        self._ffmpeg_path,
                        encode_pass.args,
                        None,
                        ProgressLogger(duration, label=label),
                        env=self._env,
                    )
            logger.info("Finished %s", plan.output_path)
        return len(plan.passes)

    def execute(self, job: VideoEncodeJob) -> list[EncodeResult]:
        """Encode every output of job.

        All submitted outputs run to completion; if any failed, the first
        failure (in output order) is raised afterwards.

        Returns:
            One EncodeResult per output, in output order.

        Raises:
            JobValidationError: If the job is misconfigured.
            ProviderContentError: If the source cannot be encoded as delivered.
            ToolError: If an ffmpeg pass fails.
        """
        plans = plan_job(job)
        job.output_dir.mkdir(parents=True, exist_ok=True)
        duration = job.input_media.duration

        effective_workers = min(len(plans), self._max_workers)
        id_width = len(str(len(plans)))
        logger.info(
            "Encoding %d output(s) with %d worker(s)", len(plans), effective_workers
        )

        results: dict[int, EncodeResult] = {}
        errors: dict[int, BaseException] = {}

        with ThreadPoolExecutor(max_workers=effective_workers) as executor:
            futures: dict[Future[int], int] = {}
            for index, (_, plan) in enumerate(plans, start=1):
                # Logical worker slot, not the executing thread
                worker_id = f"{((index - 1) % effective_workers) + 1:02d}"
                output_id = f"O{index:0{id_width}d}"
                future = executor.submit(
                    self._encode_output, plan, duration, worker_id, output_id
                )
                futures[future] = index

            for future in as_completed(futures):
                index = futures[future]
                output, plan = plans[index - 1]
                try:
                    passes_run = future.result()
                except Exception as e:
                    logger.error("Encode failed for %s: %s", plan.output_path, e)
                    errors[index] = e
                    continue
                results[index] = EncodeResult(
                    output=output, output_path=plan.output_path, passes_run=passes_run
                )

        if errors:
            raise errors[min(errors)]
        return [results[i] for i in sorted(results)]
