"""Frame timing for sampling still frames out of a video source."""

from .frame_planner import FramePlan, plan_frame_times

__all__ = [
    "FramePlan",
    "plan_frame_times",
]
