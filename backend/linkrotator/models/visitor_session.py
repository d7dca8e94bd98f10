from sqlalchemy import Column, Integer, String, DateTime, func
from ..database import Base


class VisitorSession(Base):
    """One row per browser, refreshed on every landing visit"""
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), unique=True, index=True, nullable=False)
    device_type = Column(String(20), nullable=True)
    user_agent = Column(String(512), nullable=True)
    ip_address = Column(String(45), nullable=True)  # IPv4 or IPv6
    country = Column(String(100), nullable=True)
    source = Column(String(255), nullable=True)  # Referer or utm_source
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_activity = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<VisitorSession {self.session_id}>"
