"""SQLAlchemy models for the docpager schema."""

from sqlalchemy import BigInteger, Column, DateTime, Identity, Index, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from ..config import get_settings

# Create base class for models
Base = declarative_base()


class Document(Base):
    """Documents table model.

    ``id`` is an identity column, so it grows with insertion order and
    doubles as the cursor for cursor pagination.
    """
    __tablename__ = 'documents'

    id = Column(BigInteger, Identity(always=False), primary_key=True)
    collection = Column(Text, nullable=False)
    body = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('documents_collection_id_desc', 'collection', 'id', postgresql_ops={'id': 'DESC'}),
        Index('documents_body_gin', 'body', postgresql_using='gin'),
    )


def get_database_url() -> str:
    """Get the synchronous database URL used by migrations."""
    return get_settings().database_url
