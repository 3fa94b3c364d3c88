# handgesture/services/matcher.py
import logging
import numpy as np
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from handgesture.core.config import SIMILARITY_SCALE, SIMILARITY_THRESHOLD
from handgesture.core.errors import GestureError, MalformedTemplateError
from handgesture.models.records import GestureMatch, GestureTemplate
from handgesture.services.normalization import NUM_LANDMARKS, LandmarkInput, normalize_landmarks
from handgesture.services.similarity import calculate_similarity
from handgesture.services.template_builder import average_landmarks

logger = logging.getLogger(__name__)


class GestureMatcher:
    """
    Finds the stored gesture closest to a live hand.

    Every template is reduced to the average of its recording, moved to the
    wrist origin and compared fingertip by fingertip with the live frame.
    The best template wins if it clears `threshold`. On equal scores the
    template seen first keeps the win.
    """

    def __init__(self, threshold: float = SIMILARITY_THRESHOLD, scale: float = SIMILARITY_SCALE):
        self.threshold = threshold
        self.scale = scale
        self._average_cache: Dict[Hashable, np.ndarray] = {}

    # ---------------------------------------
    # Template preparation
    # ---------------------------------------
    def _cache_key(self, template: GestureTemplate) -> Optional[Hashable]:
        if template.id is None:
            return None
        return (template.id, template.frame_count, template.created_at)

    def _reference_landmarks(self, template: GestureTemplate) -> Optional[np.ndarray]:
        """Normalized average of a template, or None when it has nothing to compare."""
        if template.frames is None:
            return None
        if not isinstance(template.frames, (list, tuple)):
            raise MalformedTemplateError(f"Template '{template.name}' frames are not a list")
        if len(template.frames) == 0:
            return None

        key = self._cache_key(template)
        if key is not None and key in self._average_cache:
            return self._average_cache[key]

        try:
            reference = normalize_landmarks(average_landmarks(template.frames))
        except GestureError as e:
            raise MalformedTemplateError(f"Template '{template.name}' is malformed: {e.message}")
        if reference.shape[0] != NUM_LANDMARKS:
            raise MalformedTemplateError(
                f"Template '{template.name}' frames have {reference.shape[0]} points, expected {NUM_LANDMARKS}"
            )

        if key is not None:
            self._average_cache[key] = reference
        return reference

    def forget(self, keep_ids: Sequence[Hashable] = ()):
        """Drop cached averages of templates that are no longer stored."""
        keep = set(keep_ids)
        for key in list(self._average_cache):
            if key[0] not in keep:
                del self._average_cache[key]

    # ---------------------------------------
    # Scoring
    # ---------------------------------------
    def score_all(
        self, live_landmarks: Optional[LandmarkInput], templates: Sequence[GestureTemplate]
    ) -> List[Tuple[str, float]]:
        """Similarity of the live hand to every eligible template, in library order."""
        normalized = normalize_landmarks(live_landmarks)
        if normalized is None:
            return []

        scores = []
        for template in templates:
            try:
                reference = self._reference_landmarks(template)
            except MalformedTemplateError as e:
                logger.warning(f"⚠️ Skipping template: {e.message}")
                continue
            if reference is None:
                continue

            similarity = calculate_similarity(normalized, reference, self.scale)
            logger.debug(f"Gesture {template.name} similarity: {similarity:.3f}")
            scores.append((template.name, similarity))
        return scores

    def match(
        self, live_landmarks: Optional[LandmarkInput], templates: Sequence[GestureTemplate]
    ) -> Optional[GestureMatch]:
        best_match = None
        for name, similarity in self.score_all(live_landmarks, templates):
            if best_match is None or similarity > best_match.score:
                best_match = GestureMatch(name=name, score=similarity)

        if best_match is not None and best_match.score >= self.threshold:
            return best_match
        return None
