"""Interlace and telecine classification.

A scan runs the idet filter followed by a fieldmatch probe. idet prints
frame population statistics when it finishes:

    Repeated Fields: Neither:  1234 Top:    12 Bottom:    10
    Single frame detection: TFF:     5 BFF:     0 Progressive:  1200 ...
    Multi frame detection: TFF:     0 BFF:     0 Progressive:  1250 ...

and fieldmatch logs one "still interlaced" line for each frame it could
not resolve. From these:

- parse_idet_output(): text -> IdetStatistics (None when absent)
- classify_statistics(): IdetStatistics -> SignalClassification
- detect_combing(): run the scan and return an updated MediaProperties

Thresholds are fixed.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass

from mediaproc.domain.models import MediaProperties
from mediaproc.filters import catalog
from mediaproc.filters.chain import FilterChain
from mediaproc.scanner.common import ScanRunner, ScanWindow

logger = logging.getLogger(__name__)

# Below this share of progressive frames the material is treated as combed
PROGRESSIVE_COMBING_THRESHOLD = 95.0
# Above this share of repeated fields combed material carries telecine
REPEAT_FIELD_TELECINE_THRESHOLD = 5.0
# Unresolved fieldmatch frames per processed frame for clean film
PURE_FILM_FAILURE_RATIO = 0.01
# Progressive share below which a clean fieldmatch means telecined film
PURE_FILM_PROGRESSIVE_THRESHOLD = 1.0
# Near-balanced TFF:BFF dominance suggests a suspect delivery
BAD_DELIVERY_RATIO_LOW = 0.75
BAD_DELIVERY_RATIO_HIGH = 1.25

SCAN_FILTERS = FilterChain((catalog.IDET, catalog.FIELDMATCH_PROBE))

_REPEATED_FIELDS = re.compile(
    r"Repeated Fields:\s*Neither:\s*(\d+)\s*Top:\s*(\d+)\s*Bottom:\s*(\d+)"
)
_SINGLE_FRAME = re.compile(
    r"Single frame detection:\s*TFF:\s*(\d+)\s*BFF:\s*(\d+)\s*Progressive:\s*(\d+)"
)
_MULTI_FRAME = re.compile(
    r"Multi frame detection:\s*TFF:\s*(\d+)\s*BFF:\s*(\d+)\s*Progressive:\s*(\d+)"
)
_STILL_INTERLACED = "still interlaced"


@dataclass(frozen=True)
class IdetStatistics:
    """Frame population counts from one idet/fieldmatch scan."""

    repeated_neither: int
    repeated_top: int
    repeated_bottom: int
    multi_tff: int
    multi_bff: int
    multi_progressive: int
    fieldmatch_failures: int

    @property
    def processed_frames(self) -> int:
        return self.repeated_neither + self.repeated_top + self.repeated_bottom

    @property
    def repeat_field_pct(self) -> float:
        """Frames with a repeated field, as a percentage of processed frames."""
        repeated = self.repeated_top + self.repeated_bottom
        return repeated * 100 / self.processed_frames

    @property
    def progressive_pct(self) -> float:
        """Progressive frames, as a percentage of processed frames."""
        return self.multi_progressive * 100 / self.processed_frames

    @property
    def tff_to_bff_ratio(self) -> float:
        """Dominant-to-minor field order ratio; 0 when either count is 0."""
        if self.multi_tff == 0 or self.multi_bff == 0:
            return 0.0
        return max(self.multi_tff, self.multi_bff) / min(
            self.multi_tff, self.multi_bff
        )

    @property
    def failure_ratio(self) -> float:
        return self.fieldmatch_failures / self.processed_frames


@dataclass(frozen=True)
class SignalClassification:
    """Classification flags derived from IdetStatistics."""

    has_combing: bool = False
    has_telecine: bool = False
    is_pure_film: bool = False
    is_pure_video: bool = False
    is_mixed_film_video: bool = False
    bad_delivery: bool = False


def parse_idet_output(text: str) -> IdetStatistics | None:
    """Extract idet/fieldmatch statistics from scan output.

    When a statistic line appears more than once the last one wins.

    Returns:
        IdetStatistics, or None when the single-frame, multi-frame or
        repeated-fields line is missing or no frames were processed.
    """
    repeated = single = multi = None
    failures = 0

    for line in text.splitlines():
        if _STILL_INTERLACED in line:
            failures += 1
            continue
        match = _REPEATED_FIELDS.search(line)
        if match:
            repeated = match
            continue
        match = _SINGLE_FRAME.search(line)
        if match:
            single = match
            continue
        match = _MULTI_FRAME.search(line)
        if match:
            multi = match

    if single is None or multi is None:
        logger.debug("No idet frame detection statistics in scan output")
        return None
    if repeated is None:
        logger.debug("No idet repeated field statistics in scan output")
        return None

    stats = IdetStatistics(
        repeated_neither=int(repeated.group(1)),
        repeated_top=int(repeated.group(2)),
        repeated_bottom=int(repeated.group(3)),
        multi_tff=int(multi.group(1)),
        multi_bff=int(multi.group(2)),
        multi_progressive=int(multi.group(3)),
        fieldmatch_failures=failures,
    )
    if stats.processed_frames == 0:
        logger.debug("idet reported zero processed frames")
        return None
    return stats


def classify_statistics(stats: IdetStatistics) -> SignalClassification:
    """Apply the classification rules in order.

    The pure-film rule does not consult has_telecine, so a source with no
    repeated fields can report is_pure_film and is_pure_video together.
    """
    progressive_pct = stats.progressive_pct
    repeat_pct = stats.repeat_field_pct
    ratio = stats.tff_to_bff_ratio

    has_combing = progressive_pct < PROGRESSIVE_COMBING_THRESHOLD
    has_telecine = has_combing and repeat_pct > REPEAT_FIELD_TELECINE_THRESHOLD
    is_pure_film = (
        stats.failure_ratio < PURE_FILM_FAILURE_RATIO
        and progressive_pct < PURE_FILM_PROGRESSIVE_THRESHOLD
    )
    is_pure_video = has_combing and not has_telecine
    is_mixed = has_combing and has_telecine and not is_pure_film
    bad_delivery = (
        has_combing and BAD_DELIVERY_RATIO_LOW < ratio < BAD_DELIVERY_RATIO_HIGH
    )

    return SignalClassification(
        has_combing=has_combing,
        has_telecine=has_telecine,
        is_pure_film=is_pure_film,
        is_pure_video=is_pure_video,
        is_mixed_film_video=is_mixed,
        bad_delivery=bad_delivery,
    )


def _log_statistics(stats: IdetStatistics, result: SignalClassification) -> None:
    logger.info("Total scanned frames (from idet): %d", stats.processed_frames)
    logger.info("Fieldmatch failures: %d", stats.fieldmatch_failures)
    logger.info("Repeat field percentage: %.2f", stats.repeat_field_pct)
    logger.info("Progressive frame percentage: %.2f", stats.progressive_pct)
    logger.info("TFF:BFF ratio: %d:%d", stats.multi_tff, stats.multi_bff)
    if result.has_combing:
        logger.info("Combing detected")
    if result.has_telecine:
        logger.info("Telecine content detected")
    if result.is_pure_film:
        logger.info("Clean telecine content detected")
    logger.info("Pure video: %s", result.is_pure_video)
    logger.info("Mixed film and video: %s", result.is_mixed_film_video)
    if result.bad_delivery:
        logger.warning(
            "Ratio of TFF and BFF frames of %.2f:1 indicates possibly poor delivery",
            stats.tff_to_bff_ratio,
        )


def apply_classification(
    props: MediaProperties, result: SignalClassification
) -> MediaProperties:
    """Return props with the classification flags replaced."""
    return dataclasses.replace(
        props,
        has_combing=result.has_combing,
        has_telecine=result.has_telecine,
        is_pure_film=result.is_pure_film,
        is_pure_video=result.is_pure_video,
        is_mixed_film_video=result.is_mixed_film_video,
        bad_delivery=result.bad_delivery,
    )


def classify_scan_output(
    props: MediaProperties, scan_output: str
) -> MediaProperties:
    """Classify props from already captured scan output.

    Absent statistics leave props unchanged.
    """
    stats = parse_idet_output(scan_output)
    if stats is None:
        logger.info(
            "Interlace statistics unavailable for %s; leaving classification unset",
            props.file_path,
        )
        return props
    result = classify_statistics(stats)
    _log_statistics(stats, result)
    return apply_classification(props, result)


def detect_combing(
    props: MediaProperties,
    scanner: ScanRunner,
    window: ScanWindow | None = None,
) -> MediaProperties:
    """Scan props' file for combing and telecine.

    Args:
        props: Unclassified probe result.
        scanner: Runs the ffmpeg analysis scan.
        window: Portion of the file to scan (default whole file).

    Returns:
        A copy of props with classification flags set.

    Raises:
        ToolError: If the scan process fails.
    """
    logger.info("Starting combing/telecine detection for %s", props.file_path)
    scan_output = scanner.run(props, SCAN_FILTERS, window or ScanWindow())
    return classify_scan_output(props, scan_output)
