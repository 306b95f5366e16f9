"""Audio capture buffer for voice notes.

Collects encoded audio chunks between start() and stop(), the way a media
recorder delivers them, and hands back the whole recording on stop.
"""

import logging

logger = logging.getLogger(__name__)


class RecorderError(RuntimeError):
    """Raised on start/stop/feed calls that do not fit the recorder state."""


class ChunkRecorder:
    """In-memory recorder fed with audio chunks by the capture layer."""

    def __init__(self, mime_type: str = "audio/webm", filename: str = "recording.webm") -> None:
        self.mime_type = mime_type
        self.filename = filename
        self._chunks: list[bytes] | None = None

    @property
    def recording(self) -> bool:
        return self._chunks is not None

    def start(self) -> None:
        if self._chunks is not None:
            raise RecorderError("Recording already in progress")
        self._chunks = []
        logger.info("Recording started")

    def feed(self, chunk: bytes) -> None:
        """Append a chunk. Empty chunks are ignored."""
        if self._chunks is None:
            raise RecorderError("Not recording")
        if chunk:
            self._chunks.append(chunk)

    def stop(self) -> bytes:
        """End the recording and return all captured bytes."""
        if self._chunks is None:
            raise RecorderError("Not recording")
        audio = b"".join(self._chunks)
        self._chunks = None
        logger.info("Recording stopped (%d bytes)", len(audio))
        return audio
