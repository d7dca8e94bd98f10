from sqlalchemy import Column, Integer, String, Text, DateTime, func
from ..database import Base


class LandingContent(Base):
    """Singleton hero copy for the landing page"""
    __tablename__ = "landing_content"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<LandingContent {self.id}>"
