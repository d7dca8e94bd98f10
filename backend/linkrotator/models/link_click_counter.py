from sqlalchemy import Column, Integer, DateTime, ForeignKey, func
from ..database import Base


class LinkClickCounter(Base):
    """Denormalized click totals per web result"""
    __tablename__ = "link_clicks"

    id = Column(Integer, primary_key=True, index=True)
    web_result_id = Column(
        Integer, ForeignKey("web_results.id", ondelete="CASCADE"),
        unique=True, nullable=False
    )
    total_clicks = Column(Integer, nullable=False, default=0)
    unique_clicks = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<LinkClickCounter result={self.web_result_id} total={self.total_clicks}>"
