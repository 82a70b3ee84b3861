"""Signal analysis scans: interlace/telecine classification and letterbox."""

from mediaproc.scanner.common import ScanRunner, ScanWindow, build_scan_args
from mediaproc.scanner.interlace import (
    IdetStatistics,
    SignalClassification,
    classify_scan_output,
    classify_statistics,
    detect_combing,
    parse_idet_output,
)
from mediaproc.scanner.letterbox import (
    detect_letterbox,
    majority_crop,
    parse_cropdetect_output,
)

__all__ = [
    "IdetStatistics",
    "ScanRunner",
    "ScanWindow",
    "SignalClassification",
    "build_scan_args",
    "classify_scan_output",
    "classify_statistics",
    "detect_combing",
    "detect_letterbox",
    "majority_crop",
    "parse_cropdetect_output",
    "parse_idet_output",
]
