"""Video signal analysis and ffmpeg encode parameter derivation."""

__version__ = "0.1.0"
