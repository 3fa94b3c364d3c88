# handgesture/services/similarity.py
import numpy as np
from typing import Optional

from handgesture.core.config import SIMILARITY_SCALE

# Thumb, index, middle, ring and pinky tips
FINGERTIPS = (4, 8, 12, 16, 20)


def calculate_similarity(
    landmarks_a: Optional[np.ndarray],
    landmarks_b: Optional[np.ndarray],
    scale: float = SIMILARITY_SCALE,
) -> float:
    """
    Score how close two normalized hands are, from 0 (unrelated) to 1 (identical).

    Only the five fingertips take part, and only in the x/y plane.
    The summed squared distance is mapped linearly onto [0, 1] by `scale`,
    so `scale` has to follow the pixel resolution of the camera.
    """
    if landmarks_a is None or landmarks_b is None:
        return 0.0
    a = np.asarray(landmarks_a, dtype=np.float64)
    b = np.asarray(landmarks_b, dtype=np.float64)
    if len(a) != len(b) or len(a) <= max(FINGERTIPS):
        return 0.0

    tips = list(FINGERTIPS)
    deltas = a[tips, :2] - b[tips, :2]
    sum_distances = float(np.sum(deltas * deltas))

    return max(0.0, 1.0 - sum_distances / scale)
