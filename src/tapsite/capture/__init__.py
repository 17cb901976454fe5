"""Trailer video capture: frame schedule, browser driver and FFmpeg encoding."""
from tapsite.capture.encoder import check_encoder, encode_frames, transcode_recording
from tapsite.capture.recorder import CaptureResult, Strategy, capture_frames, record_frames, record_realtime
from tapsite.capture.storyboard import CaptureState, FrameStep, frame_schedule

__all__ = [
    "CaptureResult",
    "CaptureState",
    "FrameStep",
    "Strategy",
    "capture_frames",
    "check_encoder",
    "encode_frames",
    "frame_schedule",
    "record_frames",
    "record_realtime",
    "transcode_recording",
]
