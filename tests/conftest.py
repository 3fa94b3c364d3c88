from datetime import datetime, timezone

import pytest

from handgesture.core.database import init_db, make_engine, make_session_factory
from handgesture.core.errors import StorageFailureError
from handgesture.models.records import GestureTemplate
from handgesture.models.template import GestureTemplateRow
from handgesture.services.recognition_pipeline import RecognitionPipeline
from handgesture.services.template_store import JsonBlobTemplateStore, SqlTemplateStore, TemplateStore

WRIST = (200.0, 300.0, 0.0)

# Curled hand: every joint a short distance from the wrist
CURLED_OFFSETS = {i: (4.0 + i % 5, -6.0 - i % 4, 0.0) for i in range(1, 21)}


def make_hand(tips=None, wrist=WRIST, z=0.0):
    """
    A 21-point frame. `tips` maps landmark index -> (dx, dy, dz) relative to the wrist;
    all other joints are curled near the wrist.
    """
    offsets = dict(CURLED_OFFSETS)
    offsets.update(tips or {})
    frame = [[wrist[0], wrist[1], wrist[2]]]
    for i in range(1, 21):
        dx, dy, dz = offsets[i]
        frame.append([wrist[0] + dx, wrist[1] + dy, dz + z])
    return frame


def thumbs_up(wrist=WRIST, jitter=0.0):
    return make_hand({4: (100.0, 50.0 + jitter, 0.0)}, wrist=wrist)


def open_palm(wrist=WRIST):
    return make_hand({
        4: (-80.0, -60.0, 0.0),
        8: (-40.0, -160.0, 0.0),
        12: (0.0, -180.0, 0.0),
        16: (40.0, -160.0, 0.0),
        20: (80.0, -120.0, 0.0),
    }, wrist=wrist)


def insert_template_row(sql_store, name, frames_json):
    """Write a row straight to the table, bypassing the store's own checks."""
    db = sql_store.session_factory()
    try:
        db.add(GestureTemplateRow(name=name, frames=frames_json, frame_count=0, created_at=datetime.now(timezone.utc)))
        db.commit()
    finally:
        db.close()


class RecordingStore(TemplateStore):
    """In-memory store that counts calls and can be told to fail."""

    def __init__(self):
        self.templates = []
        self.create_calls = 0
        self.list_calls = 0
        self.fail_reads = False
        self.fail_writes = False

    def list_templates(self):
        self.list_calls += 1
        if self.fail_reads:
            raise StorageFailureError("store offline")
        return list(self.templates)

    def create(self, name, frames):
        self.create_calls += 1
        if self.fail_writes:
            return False
        self.templates.append(GestureTemplate(name=name, frames=frames, id=len(self.templates) + 1000))
        return True

    def delete_one(self, index):
        if self.fail_writes or not 0 <= index < len(self.templates):
            return False
        del self.templates[index]
        return True

    def delete_all(self):
        if self.fail_writes:
            return False
        self.templates = []
        return True


@pytest.fixture
def sql_store():
    engine = make_engine("sqlite://", echo=False)
    init_db(engine)
    yield SqlTemplateStore(make_session_factory(engine))
    engine.dispose()


@pytest.fixture
def json_store(tmp_path):
    return JsonBlobTemplateStore(str(tmp_path / "gesture_datasets.json"))


@pytest.fixture(params=["sql", "json"])
def store(request, sql_store, json_store):
    return sql_store if request.param == "sql" else json_store


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def pipeline(sql_store):
    return RecognitionPipeline(sql_store)
