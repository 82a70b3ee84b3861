"""Letterbox detection with cropdetect.

cropdetect logs one line per analyzed frame ending in a ready-made crop
token, e.g.

    [Parsed_cropdetect_0 @ 0x5581] x1:0 x2:1919 y1:138 y2:941 w:1920 h:800
    x:0 y:140 pts:1001 t:0.041708 crop=1920:800:0:140

Observations are reduced by majority vote on the vertical extent. When the
top and bottom bars disagree by more than RESCAN_IMBALANCE_THRESHOLD the
top of the frame is masked (noise in the first lines of SD captures
defeats bar detection) and the scan is repeated.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable

from mediaproc.domain.models import CropValue, MediaProperties
from mediaproc.filters import catalog
from mediaproc.filters.chain import FilterChain
from mediaproc.scanner.common import ScanRunner, ScanWindow

logger = logging.getLogger(__name__)

# Top/bottom bar difference (px) that triggers the masked re-scan
RESCAN_IMBALANCE_THRESHOLD = 16
# Minimum bar coverage (px) before a letterbox is declared
MIN_LETTERBOX_COVERAGE = 16

# Frame-height bands for the re-scan mask
PAL_HEIGHT_RANGE = (525, 650)  # exclusive bounds
PAL_MASK = 32
NTSC_MAX_HEIGHT = 525
NTSC_MASK = 16

_CROP_TOKEN = "crop="
_CROPDETECT_MARKER = "Parsed_cropdetect"


def parse_crop_line(line: str) -> CropValue | None:
    """Parse the crop=w:h:x:y token of one cropdetect line.

    Returns:
        The observation, or None when the line has no well-formed token.
    """
    for token in line.split():
        if not token.startswith(_CROP_TOKEN):
            continue
        fields = token[len(_CROP_TOKEN) :].split(":")
        if len(fields) != 4:
            return None
        try:
            width, height, x, y = (int(f) for f in fields)
        except ValueError:
            return None
        return CropValue(x_offset=x, y_offset=y, x_extent=width, y_extent=height)
    return None


def parse_cropdetect_output(text: str) -> list[CropValue]:
    """Return every crop observation in scan output, in order."""
    observations = []
    for line in text.splitlines():
        if _CROPDETECT_MARKER not in line:
            continue
        crop = parse_crop_line(line)
        if crop is None:
            logger.debug("Skipping malformed cropdetect line: %s", line)
            continue
        observations.append(crop)
    return observations


def majority_crop(observations: Iterable[CropValue]) -> CropValue | None:
    """Pick the most frequently reported vertical extent.

    Ties go to the extent seen first. The winning group's first
    observation supplies the offsets and horizontal extent.
    """
    groups: dict[int, list] = {}
    for crop in observations:
        entry = groups.get(crop.y_extent)
        if entry is None:
            groups[crop.y_extent] = [1, crop]
        else:
            entry[0] += 1

    best: CropValue | None = None
    best_count = 0
    for count, first in groups.values():
        if count > best_count:
            best, best_count = first, count
    return best


def noise_mask_height(frame_height: int) -> int:
    """Rows masked from the top of the frame for the re-scan."""
    low, high = PAL_HEIGHT_RANGE
    if low < frame_height < high:
        return PAL_MASK
    if frame_height <= NTSC_MAX_HEIGHT:
        return NTSC_MASK
    return 0


def needs_rescan(crop: CropValue, frame_height: int) -> bool:
    """True when the bottom bar differs from the top bar by too much."""
    bottom = frame_height - crop.y_extent - crop.y_offset
    return abs(bottom - crop.y_offset) > RESCAN_IMBALANCE_THRESHOLD


def _scan(
    props: MediaProperties,
    scanner: ScanRunner,
    chain: FilterChain,
    window: ScanWindow,
) -> CropValue | None:
    return majority_crop(parse_cropdetect_output(scanner.run(props, chain, window)))


def detect_letterbox(
    props: MediaProperties,
    scanner: ScanRunner,
    window: ScanWindow | None = None,
) -> MediaProperties:
    """Detect black bars and derive a crop filter.

    Args:
        props: Probe result with a video stream.
        scanner: Runs the ffmpeg analysis scan.
        window: Portion of the file to scan (default whole file).

    Returns:
        A copy of props with crop, crop_filter and has_letterbox set. When
        no crop observations are reported props is returned unchanged.

    Raises:
        ValueError: If props has no video stream.
        ToolError: If a scan process fails.
    """
    stream = props.require_video_stream()
    window = window or ScanWindow()
    frame_width, frame_height = stream.width, stream.height

    logger.info("Starting letterbox detection for %s", props.file_path)
    crop = _scan(props, scanner, FilterChain((catalog.CROPDETECT,)), window)
    if crop is None:
        logger.info("No cropdetect observations for %s", props.file_path)
        return props

    if needs_rescan(crop, frame_height):
        mask = noise_mask_height(frame_height)
        chain = FilterChain()
        if mask:
            chain = chain.add(
                catalog.crop_filter(frame_width, frame_height - mask, 0, mask)
            )
        chain = chain.add(catalog.CROPDETECT)

        logger.info(
            "Starting second letterbox detection scan due to detected noise "
            "(top mask %d px)",
            mask,
        )
        rescanned = _scan(props, scanner, chain, window)
        if rescanned is None:
            logger.info("No cropdetect observations on re-scan of %s", props.file_path)
            return props
        crop = dataclasses.replace(rescanned, y_offset=rescanned.y_offset + mask)

    if abs(crop.y_extent - frame_height) <= MIN_LETTERBOX_COVERAGE:
        logger.info(
            "No letterbox: detected height %d vs frame height %d",
            crop.y_extent,
            frame_height,
        )
        return dataclasses.replace(
            props, has_letterbox=False, crop=crop, crop_filter=None
        )

    extent = crop.y_extent - crop.y_extent % 2
    final = CropValue(
        x_offset=0, y_offset=crop.y_offset, x_extent=frame_width, y_extent=extent
    )
    crop_filter = catalog.crop_filter(frame_width, extent, 0, crop.y_offset)
    logger.info("Letterbox detected: %s", crop_filter)
    return dataclasses.replace(
        props, has_letterbox=True, crop=final, crop_filter=crop_filter
    )
