"""Filter-graph string assembly.

A FilterChain is an ordered, immutable sequence of ffmpeg filter
expressions. It renders in two forms:

- video_filters(): a linear chain for -vf, with numbered pads
  "[F1]f1[F2];[F2]f2[V]".
- filter_complex(): a chain for -filter_complex whose first pad names an
  input file/stream ("[0:0]") and whose last pad is a caller-chosen output
  label. Inner pads are "[{pad_root}{n}]".

Pad numbering starts at 1 for the first filter's input and increments per
stage. An empty chain renders as an empty string in both forms.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class FilterChain:
    """Ordered ffmpeg filter expressions."""

    filters: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.filters)

    def __bool__(self) -> bool:
        return bool(self.filters)

    def add(self, filter_expr: str) -> FilterChain:
        """Return a chain with filter_expr appended."""
        return FilterChain((*self.filters, filter_expr))

    def video_filters(self) -> str:
        """Render for use with -vf."""
        count = len(self.filters)
        parts = []
        for index, expr in enumerate(self.filters, start=1):
            out_pad = f"[F{index + 1}];" if index != count else "[V]"
            parts.append(f"[F{index}]{expr}{out_pad}")
        return "".join(parts)

    def filter_complex(
        self,
        file_index: int,
        stream_index: int,
        pad_root: str,
        output_pad: str | None,
    ) -> str:
        """Render for use with -filter_complex.

        Args:
            file_index: ffmpeg input index feeding the first filter (0-based).
            stream_index: Stream index within that input (0-based).
            pad_root: Prefix for the intermediate pad labels.
            output_pad: Label for the final output, or None for no label.
        """
        count = len(self.filters)
        parts = []
        for index, expr in enumerate(self.filters, start=1):
            if index == 1:
                in_pad = f"[{file_index}:{stream_index}]"
            else:
                in_pad = f"[{pad_root}{index}]"

            if index != count:
                out_pad = f"[{pad_root}{index + 1}];"
            elif output_pad is None:
                out_pad = ""
            else:
                out_pad = f"[{output_pad}]"

            parts.append(f"{in_pad}{expr}{out_pad}")
        return "".join(parts)
