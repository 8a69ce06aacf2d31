from sqlalchemy import Column, Integer, String, JSON, DateTime, func
from ..db.base import Base


class Document(Base):
    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    id = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    # растёт на 1 при каждой записи, нужен для оптимистичных транзакций
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
