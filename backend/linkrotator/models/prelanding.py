from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, func
from ..database import Base


class Prelanding(Base):
    """Email capture page shown before the external redirect"""
    __tablename__ = "prelandings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(255), unique=True, index=True, nullable=False)
    headline = Column(String(255), nullable=False)
    subtitle = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    logo_url = Column(String(2048), nullable=True)
    main_image_url = Column(String(2048), nullable=True)
    redirect_description = Column(String(512), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Prelanding {self.key}>"
