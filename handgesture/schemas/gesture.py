from datetime import datetime
from typing import Annotated, Any, List, Optional, Tuple

from pydantic import BaseModel, Field

# [x, y, z] for each of the 21 hand joints, wrist first
Point = Tuple[float, float, float]
LandmarkFrame = Annotated[List[Point], Field(min_length=21, max_length=21)]


class RecognizeRequest(BaseModel):
    hands: List[LandmarkFrame] = []
    debug: bool = False


class RecognizeResponse(BaseModel):
    detected: bool
    gesture: Optional[str] = None
    score: Optional[float] = None
    announce: Optional[str] = None
    scores: Optional[dict] = None


class TrainRequest(BaseModel):
    name: str = ""
    frames: List[LandmarkFrame] = []


class TrainResponse(BaseModel):
    success: bool
    name: str
    frame_count: int
    message: str = ""
    warnings: List[str] = []


class TemplateSummary(BaseModel):
    index: int
    name: str
    frame_count: int
    created_at: datetime


class TemplateDetail(TemplateSummary):
    # echoed as stored, even when a record is malformed
    frames: Any


class DatasetRecord(BaseModel):
    name: str
    frames: List[List[List[float]]] = []
    createdAt: Optional[str] = None


class ExportedRecord(BaseModel):
    name: str
    frames: Any = []
    createdAt: Optional[str] = None


class ImportResponse(BaseModel):
    imported: int
    rejected: List[TrainResponse] = []


class CaptureStartRequest(BaseModel):
    name: str = ""


class CaptureFrameRequest(BaseModel):
    hands: List[LandmarkFrame] = []


class CaptureStatus(BaseModel):
    recording: bool
    name: Optional[str] = None
    frame_count: int
    progress: int
    hand_detected: bool


class HistoryResponse(BaseModel):
    current: str
    entries: List[str]
    speech_enabled: bool


class SpeechToggle(BaseModel):
    enabled: bool
