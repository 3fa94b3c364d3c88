# handgesture/services/template_builder.py
import numpy as np
from typing import Optional, Sequence

from handgesture.core.errors import MalformedInputError
from handgesture.services.normalization import LandmarkInput, landmarks_to_array


def average_landmarks(frames: Optional[Sequence[LandmarkInput]]) -> Optional[np.ndarray]:
    """
    Average a recording into one landmark frame.
    Each point's (x, y, z) is the mean of that point over every frame.
    All frames must have the same shape.
    """
    if frames is None:
        return None
    if not isinstance(frames, (list, tuple, np.ndarray)):
        raise MalformedInputError(f"Frames must be a list of landmark frames, got {type(frames).__name__}")
    if len(frames) == 0:
        return None

    arrays = []
    for i, frame in enumerate(frames):
        arr = landmarks_to_array(frame)
        if arr is None:
            raise MalformedInputError(f"Frame {i} is empty")
        if arrays and arr.shape != arrays[0].shape:
            raise MalformedInputError(
                f"Frame {i} has {arr.shape[0]} points, expected {arrays[0].shape[0]}"
            )
        arrays.append(arr)

    return np.stack(arrays).mean(axis=0)
