"""GifClip - turn a window of a video into an animated GIF."""

__version__: str = "0.1.0"
__author__: str = "GifClip Team"
__email__: str = "team@gifclip.example"

# Public re-exports for convenience ---------------------------------------------------

from .converter import GifConverter
from .coordinator import CaptureState, SequentialCaptureCoordinator
from .encoders import EncoderSettings, FrameEncoder, PillowGifEncoder
from .error_handling import (
    EncodingError,
    ErrorKind,
    FrameCaptureError,
    GifClipError,
    InvalidInputError,
    JobInProgressError,
    MediaLoadError,
    SizeLimitExceededError,
    UnsupportedMediaTypeError,
)
from .finalizer import ResultFinalizer, suggest_file_name
from .job import (
    CapturedFrame,
    ConversionJob,
    ConversionOutcome,
    ConversionResult,
    JobState,
)
from .progress import ProgressAggregator, ProgressState
from .quality import QualityTier, quality_parameter
from .sampling import FramePlan, plan_frame_times
from .sources import OpenCVVideoSource, VideoSource
