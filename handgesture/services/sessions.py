# handgesture/services/sessions.py
import logging
from collections import deque
from typing import List, Optional, Sequence

from handgesture.core.config import HISTORY_SIZE, RECOMMENDED_TRAINING_FRAMES
from handgesture.core.errors import MissingNameError
from handgesture.models.records import GestureMatch
from handgesture.services.normalization import LandmarkInput
from handgesture.services.recognition_pipeline import RecognitionPipeline, TrainingResult

logger = logging.getLogger(__name__)

NO_GESTURE = "No gesture detected"


class CaptureSession:
    """Records one hand per tick while a new gesture is being trained."""

    def __init__(self, pipeline: RecognitionPipeline, recommended_frames: int = RECOMMENDED_TRAINING_FRAMES):
        self.pipeline = pipeline
        self.recommended_frames = recommended_frames
        self.name: Optional[str] = None
        self.frames: List[LandmarkInput] = []
        self.hand_detected = False

    @property
    def recording(self) -> bool:
        return self.name is not None

    @property
    def progress(self) -> int:
        """Percent of the recommended frame count captured so far, capped at 100."""
        if self.recommended_frames <= 0:
            return 100
        return min(len(self.frames) * 100 // self.recommended_frames, 100)

    def start(self, name: Optional[str]):
        name = (name or "").strip()
        if not name:
            raise MissingNameError("Please enter a gesture name")
        self.name = name
        self.frames = []
        self.hand_detected = False
        logger.info(f"🎬 Recording gesture '{name}'")

    def add_hands(self, hands: Optional[Sequence[LandmarkInput]]) -> bool:
        """Keep the first detected hand. Returns whether a hand was seen this tick."""
        if not self.recording:
            return False
        self.hand_detected = bool(hands)
        if self.hand_detected:
            self.frames.append(hands[0])
        return self.hand_detected

    def stop(self) -> TrainingResult:
        name, frames = self.name, self.frames
        self.name = None
        self.frames = []
        self.hand_detected = False
        return self.pipeline.train_template(name, frames)


class RecognitionHistory:
    """
    What the user has been shown: the current label, the last distinct
    gestures (newest first), and which gesture was last spoken aloud.
    """

    def __init__(self, size: int = HISTORY_SIZE, speech_enabled: bool = True):
        self.entries = deque(maxlen=size)
        self.current = NO_GESTURE
        self.last_announced: Optional[str] = None
        self.speech_enabled = speech_enabled

    def update(self, match: Optional[GestureMatch]) -> Optional[str]:
        """Record a tick's result. Returns the gesture name to announce, if any."""
        label = match.name if match is not None else NO_GESTURE

        if label != self.current:
            logger.info(f"Recognized gesture: {label}")
            self.current = label
            if label != NO_GESTURE and (not self.entries or self.entries[0] != label):
                self.entries.appendleft(label)

        if self.speech_enabled and label != NO_GESTURE and label != self.last_announced:
            self.last_announced = label
            return label
        return None

    def clear(self):
        self.entries.clear()
        self.current = NO_GESTURE
        self.last_announced = None
