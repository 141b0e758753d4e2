import uuid
from datetime import datetime

from sqlalchemy import JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

from creator_program.db.types import UTCDateTime

# JSONB on Postgres, plain JSON elsewhere (SQLite test runs)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    type_annotation_map = {
        datetime: UTCDateTime(),
        uuid.UUID: Uuid(),
        dict: JSONType,
        list: JSONType,
    }
