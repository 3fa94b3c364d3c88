# handgesture/api/routes_gestures.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from handgesture.core.errors import ErrorKind, GestureError, MalformedInputError, StorageFailureError
from handgesture.models.records import GestureTemplate
from handgesture.schemas.gesture import (
    CaptureFrameRequest,
    CaptureStartRequest,
    CaptureStatus,
    DatasetRecord,
    ExportedRecord,
    HistoryResponse,
    ImportResponse,
    RecognizeRequest,
    RecognizeResponse,
    SpeechToggle,
    TemplateDetail,
    TemplateSummary,
    TrainRequest,
    TrainResponse,
)
from handgesture.services.recognition_pipeline import RecognitionPipeline, TrainingResult
from handgesture.services.sessions import CaptureSession, RecognitionHistory

router = APIRouter()
logger = logging.getLogger(__name__)


# ------------------ Dependencies ------------------

def get_pipeline(request: Request) -> RecognitionPipeline:
    return request.app.state.pipeline


def get_history(request: Request) -> RecognitionHistory:
    return request.app.state.history


def get_capture(request: Request) -> CaptureSession:
    return request.app.state.capture


# ------------------ Utilities ------------------

def _training_response(result: TrainingResult) -> TrainResponse:
    return TrainResponse(
        success=result.success,
        name=result.name,
        frame_count=result.frame_count,
        message=result.message,
        warnings=result.warnings,
    )


def _raise_for_training(result: TrainingResult):
    if result.success:
        return
    status = 503 if result.error == ErrorKind.STORAGE_FAILURE else 400
    raise HTTPException(status_code=status, detail={"error": result.error.value, "message": result.message})


def _summary(index: int, template: GestureTemplate) -> TemplateSummary:
    return TemplateSummary(
        index=index,
        name=template.name,
        frame_count=template.frame_count,
        created_at=template.created_at,
    )


def _capture_status(capture: CaptureSession) -> CaptureStatus:
    return CaptureStatus(
        recording=capture.recording,
        name=capture.name,
        frame_count=len(capture.frames),
        progress=capture.progress,
        hand_detected=capture.hand_detected,
    )


# ------------------ Recognition ------------------

@router.post("/recognize", response_model=RecognizeResponse)
def recognize(
    payload: RecognizeRequest,
    pipeline: RecognitionPipeline = Depends(get_pipeline),
    history: RecognitionHistory = Depends(get_history),
):
    try:
        match = pipeline.recognize_hands(payload.hands)
        scores = None
        if payload.debug and payload.hands:
            scores = {name: round(score, 3) for name, score in pipeline.score_templates(payload.hands[0])}
    except MalformedInputError as e:
        raise HTTPException(status_code=400, detail={"error": e.kind.value, "message": e.message})

    announce = history.update(match)
    return RecognizeResponse(
        detected=bool(payload.hands),
        gesture=match.name if match else None,
        score=round(match.score, 3) if match else None,
        announce=announce,
        scores=scores,
    )


@router.get("/history", response_model=HistoryResponse)
def get_recognition_history(history: RecognitionHistory = Depends(get_history)):
    return HistoryResponse(current=history.current, entries=list(history.entries), speech_enabled=history.speech_enabled)


@router.put("/history/speech", response_model=HistoryResponse)
def set_speech(toggle: SpeechToggle, history: RecognitionHistory = Depends(get_history)):
    history.speech_enabled = toggle.enabled
    return get_recognition_history(history)


# ------------------ Templates ------------------

@router.post("/templates", response_model=TrainResponse, status_code=201)
def train_template(payload: TrainRequest, pipeline: RecognitionPipeline = Depends(get_pipeline)):
    result = pipeline.train_template(payload.name, payload.frames)
    _raise_for_training(result)
    return _training_response(result)


@router.get("/templates", response_model=List[TemplateSummary])
def list_templates(pipeline: RecognitionPipeline = Depends(get_pipeline)):
    return [_summary(i, t) for i, t in enumerate(pipeline.load_templates())]


@router.get("/templates/export", response_model=List[ExportedRecord])
def export_templates(pipeline: RecognitionPipeline = Depends(get_pipeline)):
    try:
        return pipeline.export_templates()
    except StorageFailureError as e:
        raise HTTPException(status_code=503, detail={"error": e.kind.value, "message": e.message})


@router.post("/templates/import", response_model=ImportResponse)
def import_templates(records: List[DatasetRecord], pipeline: RecognitionPipeline = Depends(get_pipeline)):
    imported, rejected = pipeline.import_templates([r.model_dump() for r in records])
    logger.info(f"📥 Imported {imported} gesture datasets, rejected {len(rejected)}")
    return ImportResponse(imported=imported, rejected=[_training_response(r) for r in rejected])


@router.get("/templates/{index}", response_model=TemplateDetail)
def get_template(index: int, pipeline: RecognitionPipeline = Depends(get_pipeline)):
    try:
        template = pipeline.get_template(index)
    except StorageFailureError as e:
        raise HTTPException(status_code=503, detail={"error": e.kind.value, "message": e.message})
    if template is None:
        raise HTTPException(status_code=404, detail=f"No gesture dataset at index {index}")
    return TemplateDetail(**_summary(index, template).model_dump(), frames=template.frames)


@router.delete("/templates/{index}")
def delete_template(index: int, pipeline: RecognitionPipeline = Depends(get_pipeline)):
    try:
        exists = pipeline.get_template(index) is not None
    except StorageFailureError as e:
        raise HTTPException(status_code=503, detail={"error": e.kind.value, "message": e.message})
    if not exists:
        raise HTTPException(status_code=404, detail=f"No gesture dataset at index {index}")
    if not pipeline.delete_template(index):
        raise HTTPException(status_code=503, detail={"error": ErrorKind.STORAGE_FAILURE.value, "message": "Could not delete the gesture dataset"})
    return {"deleted": index}


@router.delete("/templates")
def delete_all_templates(pipeline: RecognitionPipeline = Depends(get_pipeline)):
    if not pipeline.delete_all_templates():
        raise HTTPException(status_code=503, detail={"error": ErrorKind.STORAGE_FAILURE.value, "message": "Could not delete the gesture datasets"})
    return {"deleted": "all"}


# ------------------ Capture (training recorder) ------------------

@router.post("/capture/start", response_model=CaptureStatus)
def start_capture(payload: CaptureStartRequest, capture: CaptureSession = Depends(get_capture)):
    try:
        capture.start(payload.name)
    except GestureError as e:
        raise HTTPException(status_code=400, detail={"error": e.kind.value, "message": e.message})
    return _capture_status(capture)


@router.post("/capture/frame", response_model=CaptureStatus)
def capture_frame(payload: CaptureFrameRequest, capture: CaptureSession = Depends(get_capture)):
    if not capture.recording:
        raise HTTPException(status_code=409, detail="No recording in progress")
    capture.add_hands(payload.hands)
    return _capture_status(capture)


@router.post("/capture/stop", response_model=TrainResponse, status_code=201)
def stop_capture(capture: CaptureSession = Depends(get_capture)):
    if not capture.recording:
        raise HTTPException(status_code=409, detail="No recording in progress")
    result = capture.stop()
    _raise_for_training(result)
    return _training_response(result)
