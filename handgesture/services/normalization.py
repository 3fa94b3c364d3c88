# handgesture/services/normalization.py
import numpy as np
from typing import Optional, Sequence, Union

from handgesture.core.errors import MalformedInputError

WRIST = 0
NUM_LANDMARKS = 21

LandmarkInput = Union[np.ndarray, Sequence[Sequence[float]]]


def landmarks_to_array(landmarks: Optional[LandmarkInput]) -> Optional[np.ndarray]:
    """Turn a landmark frame ([[x, y, z], ...]) into a float array of shape (N, 3)."""
    if landmarks is None:
        return None
    try:
        arr = np.asarray(landmarks, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"Landmarks are not a numeric grid: {e}")
    if arr.ndim > 0 and arr.size == 0:
        return None
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise MalformedInputError(f"Expected points of 3 coordinates, got shape {arr.shape}")
    return arr


def normalize_landmarks(landmarks: Optional[LandmarkInput]) -> Optional[np.ndarray]:
    """
    Move the hand so the wrist sits at the origin of the x/y plane.
    z is left as reported. Rotation and scale are not corrected.
    """
    arr = landmarks_to_array(landmarks)
    if arr is None:
        return None

    normalized = arr.copy()
    normalized[:, :2] -= arr[WRIST, :2]
    return normalized
