"""MediaIntrospector interface for media property extraction."""

from pathlib import Path
from typing import Protocol

from mediaproc.domain.models import MediaProperties


class MediaIntrospector(Protocol):
    """Protocol for media introspection implementations.

    Implementations gather structural facts about a file (streams, geometry,
    HDR metadata) without analysing picture content.
    """

    def get_media_properties(self, path: Path) -> MediaProperties:
        """Probe a media file.

        Args:
            path: Path to the media file.

        Returns:
            Unclassified MediaProperties for the file.

        Raises:
            ProbeError: If probe output cannot be deserialized.
            ToolError: If a probe tool is missing or fails.
        """
        ...
