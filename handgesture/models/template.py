from sqlalchemy import Column, BigInteger, Integer, String, Text, TIMESTAMP
from handgesture.core.database import Base


class GestureTemplateRow(Base):
    __tablename__ = "gesture_templates"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    frames = Column(Text, nullable=False)  # JSON list of frames, each 21 [x, y, z] points
    frame_count = Column(Integer, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False)
