"""Filter-graph construction for ffmpeg."""

from mediaproc.filters import catalog
from mediaproc.filters.chain import FilterChain

__all__ = ["FilterChain", "catalog"]
