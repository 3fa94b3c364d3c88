# handgesture/services/recognition_pipeline.py
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from handgesture.core.config import MIN_TRAINING_FRAMES, RECOMMENDED_TRAINING_FRAMES
from handgesture.core.errors import (
    ErrorKind,
    GestureError,
    MalformedInputError,
    MissingNameError,
    StorageFailureError,
    TooFewFramesError,
)
from handgesture.models.records import Frame, GestureMatch, GestureTemplate
from handgesture.services.matcher import GestureMatcher
from handgesture.services.normalization import NUM_LANDMARKS, LandmarkInput, landmarks_to_array
from handgesture.services.template_store import TemplateStore

logger = logging.getLogger(__name__)


@dataclass
class TrainingResult:
    success: bool
    name: str
    frame_count: int
    error: Optional[ErrorKind] = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)


class RecognitionPipeline:
    """
    Entry point used by the UI on every tick and by the training screens.

    The store is handed in, never looked up. The last library read that
    succeeded is kept so a failing store degrades to the previous set of
    gestures (or to an empty library on a cold start).
    """

    def __init__(
        self,
        store: TemplateStore,
        matcher: Optional[GestureMatcher] = None,
        min_frames: int = MIN_TRAINING_FRAMES,
        recommended_frames: int = RECOMMENDED_TRAINING_FRAMES,
    ):
        self.store = store
        self.matcher = matcher or GestureMatcher()
        self.min_frames = min_frames
        self.recommended_frames = recommended_frames

        self._snapshot: List[GestureTemplate] = []
        self._in_flight = threading.Lock()
        self._last_result: Optional[GestureMatch] = None

    # ---------------------------------------
    # Library
    # ---------------------------------------
    def load_templates(self) -> List[GestureTemplate]:
        try:
            templates = self.store.list_templates()
        except StorageFailureError as e:
            logger.warning(f"⚠️ Using {len(self._snapshot)} cached gestures, store unavailable: {e.message}")
            return list(self._snapshot)

        self._snapshot = templates
        self.matcher.forget([t.id for t in templates if t.id is not None])
        return list(templates)

    def get_template(self, index: int) -> Optional[GestureTemplate]:
        return self.store.get(index)

    def delete_template(self, index: int) -> bool:
        deleted = self.store.delete_one(index)
        if deleted:
            logger.info(f"🗑️ Deleted gesture dataset {index}")
            self.load_templates()
        return deleted

    def delete_all_templates(self) -> bool:
        deleted = self.store.delete_all()
        if deleted:
            logger.info("🗑️ Deleted all gesture datasets")
            self._snapshot = []
            self.matcher.forget()
        return deleted

    def export_templates(self) -> List[Dict[str, Any]]:
        return [t.to_blob() for t in self.store.list_templates()]

    def import_templates(self, records: Sequence[Dict[str, Any]]) -> Tuple[int, List[TrainingResult]]:
        """Train every record of a dataset blob. Returns the number saved and the rejected results."""
        imported = 0
        rejected = []
        for record in records:
            if not isinstance(record, dict):
                rejected.append(TrainingResult(
                    success=False,
                    name="",
                    frame_count=0,
                    error=ErrorKind.MALFORMED_INPUT,
                    message="Record is not a gesture dataset",
                ))
                continue
            template = GestureTemplate.from_blob(record)
            result = self.train_template(template.name, template.frames)
            if result.success:
                imported += 1
            else:
                rejected.append(result)
        return imported, rejected

    # ---------------------------------------
    # Recognition
    # ---------------------------------------
    def recognize(self, landmarks: Optional[LandmarkInput]) -> Optional[GestureMatch]:
        """
        Best matching gesture for one live hand, or None.
        A tick that arrives while another is still matching is not computed;
        it gets the result of the last completed tick.
        """
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Recognition already in flight, reusing last result")
            return self._last_result

        try:
            live = landmarks_to_array(landmarks)
            if live is None:
                result = None
            else:
                templates = self.load_templates()
                result = self.matcher.match(live, templates) if templates else None
            self._last_result = result
            return result
        finally:
            self._in_flight.release()

    def recognize_hands(self, hands: Optional[Sequence[LandmarkInput]]) -> Optional[GestureMatch]:
        """Recognize from a landmark model result: zero or more hands, first hand wins."""
        if not hands:
            return self.recognize(None)
        return self.recognize(hands[0])

    def score_templates(self, landmarks: Optional[LandmarkInput]) -> List[Tuple[str, float]]:
        return self.matcher.score_all(landmarks, self.load_templates())

    # ---------------------------------------
    # Training
    # ---------------------------------------
    def _validate_training(self, name: Optional[str], frames: Optional[Sequence[LandmarkInput]]) -> Tuple[str, List[Frame]]:
        name = (name or "").strip()
        if not name:
            raise MissingNameError("Please enter a gesture name")

        if frames is None:
            frames = []
        elif not isinstance(frames, (list, tuple)):
            raise MalformedInputError(f"Frames must be a list of landmark frames, got {type(frames).__name__}")
        frames = list(frames)
        if len(frames) < self.min_frames:
            raise TooFewFramesError(
                f"Too few frames captured: {len(frames)} (minimum: {self.min_frames})"
            )

        clean_frames = []
        for i, frame in enumerate(frames):
            arr = landmarks_to_array(frame)
            if arr is None or arr.shape[0] != NUM_LANDMARKS:
                points = 0 if arr is None else arr.shape[0]
                raise MalformedInputError(f"Frame {i} has {points} points, expected {NUM_LANDMARKS}")
            clean_frames.append(arr.tolist())
        return name, clean_frames

    def train_template(self, name: Optional[str], frames: Optional[Sequence[LandmarkInput]]) -> TrainingResult:
        frame_count = len(frames) if isinstance(frames, (list, tuple)) else 0
        try:
            name, clean_frames = self._validate_training(name, frames)
        except GestureError as e:
            logger.info(f"Training rejected ({e.kind.value}): {e.message}")
            return TrainingResult(
                success=False,
                name=(name or "").strip(),
                frame_count=frame_count,
                error=e.kind,
                message=e.message,
            )

        if not self.store.create(name, clean_frames):
            return TrainingResult(
                success=False,
                name=name,
                frame_count=frame_count,
                error=ErrorKind.STORAGE_FAILURE,
                message="Could not save the gesture dataset",
            )

        warnings = []
        if frame_count < self.recommended_frames:
            warnings.append(
                f"Only {frame_count} frames recorded, at least {self.recommended_frames} are recommended"
            )

        logger.info(f"✅ Gesture '{name}' recorded with {frame_count} frames")
        self.load_templates()
        return TrainingResult(
            success=True,
            name=name,
            frame_count=frame_count,
            message=f'Gesture "{name}" recorded with {frame_count} frames.',
            warnings=warnings,
        )
