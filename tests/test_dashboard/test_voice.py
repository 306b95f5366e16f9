"""Tests for the in-memory voice recorder."""

import pytest

from notion_desk.dashboard.voice import ChunkRecorder, RecorderError


def test_records_chunks_in_order():
    """Chunks fed between start and stop are joined in order."""
    recorder = ChunkRecorder()
    recorder.start()
    recorder.feed(b"ab")
    recorder.feed(b"")
    recorder.feed(b"cd")

    assert recorder.stop() == b"abcd"
    assert recorder.recording is False


def test_start_twice_raises():
    """Starting while recording is an error."""
    recorder = ChunkRecorder()
    recorder.start()

    with pytest.raises(RecorderError):
        recorder.start()


def test_feed_and_stop_require_recording():
    """Feeding or stopping an idle recorder is an error."""
    recorder = ChunkRecorder()

    with pytest.raises(RecorderError):
        recorder.feed(b"x")
    with pytest.raises(RecorderError):
        recorder.stop()


def test_defaults_describe_webm_upload():
    """The default upload is a webm recording."""
    recorder = ChunkRecorder()

    assert recorder.mime_type == "audio/webm"
    assert recorder.filename == "recording.webm"
