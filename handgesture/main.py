# handgesture/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from handgesture.api import routes_gestures
from handgesture.core.config import CORS_ORIGINS, LOG_LEVEL
from handgesture.services.recognition_pipeline import RecognitionPipeline
from handgesture.services.sessions import CaptureSession, RecognitionHistory
from handgesture.services.template_store import build_template_store

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _attach_pipeline(app: FastAPI, pipeline: RecognitionPipeline):
    app.state.pipeline = pipeline
    app.state.history = RecognitionHistory()
    app.state.capture = CaptureSession(pipeline)


def create_app(pipeline: Optional[RecognitionPipeline] = None) -> FastAPI:
    """Build the API. Without a pipeline, one is created on startup from the configured store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "pipeline", None) is None:
            _attach_pipeline(app, RecognitionPipeline(build_template_store()))
            logger.info(f"🎯 Loaded {len(app.state.pipeline.load_templates())} gesture datasets")
        yield

    app = FastAPI(title="Hand Gesture Recognition API", version="1.0.0", lifespan=lifespan)
    app.state.pipeline = None
    if pipeline is not None:
        _attach_pipeline(app, pipeline)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes_gestures.router, prefix="/api/gestures", tags=["Gestures"])

    @app.get("/")
    def root():
        return {"message": "Hand Gesture Recognition API running"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
