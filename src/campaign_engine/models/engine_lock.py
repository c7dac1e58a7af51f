# src/campaign_engine/models/engine_lock.py
from sqlalchemy import Column, String, DateTime

from .base import Base


class EngineLock(Base):
    __tablename__ = "engine_lock"

    name = Column(String, primary_key=True)
    holder = Column(String(36), nullable=False)
    acquired_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
