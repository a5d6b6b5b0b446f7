from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from .database import Base


class IndexEntity(Base):  # type: ignore
    __tablename__ = "indexes"

    name = Column(String(255), primary_key=True)
    embedding_model = Column(String(255), nullable=False)
    text_splitter = Column(String(64), nullable=False)
    vector_db = Column(String(64), nullable=False)
    # JSON object with vector_dim and metric
    vector_db_params = Column(Text, nullable=True)
    # JSON list of dedup fields, NULL when records are hashed on their text
    unique_params = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<IndexEntity(name='{self.name}', vector_db='{self.vector_db}')>"
