from barstatus.db import Base
from sqlalchemy import Boolean, Column, DateTime, JSON, String, Text
import uuid


class Bar(Base):
    __tablename__ = 'bars'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False, default='')
    description = Column(Text, nullable=False, default='')
    weekly_schedule = Column(JSON, nullable=False, default=dict)  # {"days": [{date, isOpen, openTime, closeTime}, ...]}
    is_following_schedule = Column(Boolean, nullable=False, default=True)
    manual_status = Column(String, nullable=True)
    auto_transition = Column(JSON, nullable=True)  # {fireAt, targetStatus, isActive} or null
    status = Column(String, nullable=True)  # last recorded effective status
    last_updated = Column(DateTime, nullable=True)
