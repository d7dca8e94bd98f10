from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Index, func
from ..database import Base


class WebResult(Base):
    """Sponsored or organic listing shown on a web-results page"""
    __tablename__ = "web_results"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    original_link = Column(String(2048), nullable=False)
    logo_url = Column(String(2048), nullable=True)
    backlink = Column(String(2048), nullable=True)
    web_result_page = Column(Integer, nullable=False, default=1)
    position = Column(Integer, nullable=False, default=1)
    is_sponsored = Column(Boolean, nullable=False, default=False)
    # Matched by value against prelandings.key, not a foreign key
    prelanding_key = Column(String(255), nullable=True)
    worldwide = Column(Boolean, nullable=False, default=True)
    country_codes = Column(String(512), nullable=True)  # Comma-separated ISO codes
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_web_results_page_position', 'web_result_page', 'position'),
    )

    def __repr__(self):
        return f"<WebResult {self.title} (page {self.web_result_page})>"
