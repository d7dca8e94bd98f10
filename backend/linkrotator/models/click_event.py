from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, func
from ..database import Base

CLICK_TYPE_RELATED_SEARCH = "related_search"
CLICK_TYPE_WEB_RESULT = "web_result"


class ClickEvent(Base):
    """Append-only click log"""
    __tablename__ = "click_tracking"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(64), nullable=False, index=True)
    click_type = Column(String(20), nullable=False)
    related_search_id = Column(
        Integer, ForeignKey("related_searches.id", ondelete="CASCADE"), nullable=True
    )
    web_result_id = Column(
        Integer, ForeignKey("web_results.id", ondelete="CASCADE"), nullable=True
    )
    device_type = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    ip_address = Column(String(45), nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        Index('idx_click_tracking_related_search', 'related_search_id'),
        Index('idx_click_tracking_web_result', 'web_result_id'),
    )

    def __repr__(self):
        return f"<ClickEvent {self.id} {self.click_type}>"
