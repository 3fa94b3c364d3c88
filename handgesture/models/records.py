from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# One captured hand: 21 [x, y, z] points
Frame = List[List[float]]


@dataclass
class GestureTemplate:
    """A named recording of training frames, as read back from a template store."""
    name: str
    frames: List[Frame] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[Any] = None

    @property
    def frame_count(self) -> int:
        # stored data can hold anything under "frames"
        if not isinstance(self.frames, (list, tuple)):
            return 0
        return len(self.frames)

    def to_blob(self) -> Dict[str, Any]:
        """Record shape used by the JSON dataset blob."""
        return {
            "name": self.name,
            "frames": self.frames,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_blob(cls, data: Dict[str, Any], id: Optional[Any] = None) -> "GestureTemplate":
        created = data.get("createdAt") or data.get("created_at")
        try:
            created_at = datetime.fromisoformat(created.replace("Z", "+00:00"))
        except (AttributeError, ValueError):
            created_at = datetime.now(timezone.utc)
        return cls(
            name=data.get("name", ""),
            frames=data.get("frames") or [],
            created_at=created_at,
            id=id if id is not None else data.get("id"),
        )


@dataclass(frozen=True)
class GestureMatch:
    name: str
    score: float
