# handgesture/services/template_store.py
import json
import logging
import os
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from handgesture.core.config import TEMPLATE_BLOB_PATH, TEMPLATE_STORE
from handgesture.core.database import SessionLocal, engine, init_db
from handgesture.core.errors import StorageFailureError
from handgesture.models.records import Frame, GestureTemplate
from handgesture.models.template import GestureTemplateRow

logger = logging.getLogger(__name__)


class TemplateStore(ABC):
    """
    Persistence boundary for trained gestures.

    Reads raise StorageFailureError when the medium cannot be read.
    Writes never raise: they report success as a bool and log the cause.
    Templates are addressed by their position in `list_templates()`.
    """

    @abstractmethod
    def list_templates(self) -> List[GestureTemplate]:
        ...

    @abstractmethod
    def create(self, name: str, frames: List[Frame]) -> bool:
        ...

    @abstractmethod
    def delete_one(self, index: int) -> bool:
        ...

    @abstractmethod
    def delete_all(self) -> bool:
        ...

    def get(self, index: int) -> Optional[GestureTemplate]:
        templates = self.list_templates()
        if 0 <= index < len(templates):
            return templates[index]
        return None


###############################################
##  SQL backend (SQLAlchemy)                 ##
###############################################
class SqlTemplateStore(TemplateStore):
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def _to_record(self, row: GestureTemplateRow) -> GestureTemplate:
        created_at = row.created_at
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        try:
            frames = json.loads(row.frames) if row.frames else []
        except ValueError:
            logger.warning(f"⚠️ Template {row.id} ({row.name}) has unreadable frames")
            frames = []
        return GestureTemplate(name=row.name, frames=frames, created_at=created_at, id=row.id)

    def _rows(self, db):
        return db.query(GestureTemplateRow).order_by(GestureTemplateRow.id).all()

    def list_templates(self) -> List[GestureTemplate]:
        db = self.session_factory()
        try:
            return [self._to_record(row) for row in self._rows(db)]
        except SQLAlchemyError as e:
            logger.error(f"❌ Error loading saved gestures: {e}")
            raise StorageFailureError(f"Could not read templates: {e}")
        finally:
            db.close()

    def create(self, name: str, frames: List[Frame]) -> bool:
        db = self.session_factory()
        try:
            db.add(GestureTemplateRow(
                name=name,
                frames=json.dumps(frames),
                frame_count=len(frames),
                created_at=datetime.now(timezone.utc),
            ))
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Error saving gesture dataset '{name}': {e}")
            return False
        finally:
            db.close()

    def delete_one(self, index: int) -> bool:
        db = self.session_factory()
        try:
            rows = self._rows(db)
            if not 0 <= index < len(rows):
                return False
            db.delete(rows[index])
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Error deleting gesture dataset {index}: {e}")
            return False
        finally:
            db.close()

    def delete_all(self) -> bool:
        db = self.session_factory()
        try:
            db.query(GestureTemplateRow).delete()
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Error deleting all gesture datasets: {e}")
            return False
        finally:
            db.close()


###############################################
##  JSON blob backend (one file, one list)   ##
###############################################
class JsonBlobTemplateStore(TemplateStore):
    """
    Keeps the whole library as one JSON array of
    {"name", "frames", "createdAt"} records in a single file.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> List[dict]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"❌ Error loading saved gestures from {self.path}: {e}")
            raise StorageFailureError(f"Could not read {self.path}: {e}")
        if not isinstance(data, list):
            raise StorageFailureError(f"{self.path} does not hold a list of gestures")
        return data

    def _write(self, records: List[dict]):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(records, f)
        os.replace(tmp_path, self.path)

    def list_templates(self) -> List[GestureTemplate]:
        with self._lock:
            records = self._read()
        return [GestureTemplate.from_blob(r) for r in records if isinstance(r, dict)]

    def create(self, name: str, frames: List[Frame]) -> bool:
        template = GestureTemplate(name=name, frames=frames, id=uuid.uuid4().hex)
        with self._lock:
            try:
                records = self._read()
                records.append({**template.to_blob(), "id": template.id})
                self._write(records)
                return True
            except (OSError, StorageFailureError) as e:
                logger.error(f"❌ Error saving gesture dataset '{name}': {e}")
                return False

    def delete_one(self, index: int) -> bool:
        with self._lock:
            try:
                records = self._read()
                # indexes count only the records list_templates() shows
                positions = [i for i, r in enumerate(records) if isinstance(r, dict)]
                if not 0 <= index < len(positions):
                    return False
                del records[positions[index]]
                self._write(records)
                return True
            except (OSError, StorageFailureError) as e:
                logger.error(f"❌ Error deleting gesture dataset {index}: {e}")
                return False

    def delete_all(self) -> bool:
        with self._lock:
            try:
                if os.path.exists(self.path):
                    os.remove(self.path)
                return True
            except OSError as e:
                logger.error(f"❌ Error deleting all gesture datasets: {e}")
                return False


def build_template_store(kind: str = TEMPLATE_STORE) -> TemplateStore:
    """Store selected by the TEMPLATE_STORE setting."""
    if kind == "json":
        logger.info(f"📂 Using JSON gesture datasets at {TEMPLATE_BLOB_PATH}")
        return JsonBlobTemplateStore(TEMPLATE_BLOB_PATH)
    if kind != "sql":
        raise ValueError(f"Unknown TEMPLATE_STORE '{kind}' (use 'sql' or 'json')")

    init_db(engine)
    logger.info(f"📂 Using SQL gesture datasets at {engine.url.render_as_string(hide_password=True)}")
    return SqlTemplateStore(SessionLocal)
