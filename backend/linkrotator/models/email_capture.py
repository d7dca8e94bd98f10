from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from ..database import Base


class EmailCapture(Base):
    """Email collected on a pre-landing page"""
    __tablename__ = "email_captures"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), nullable=False)
    prelanding_key = Column(String(255), nullable=False, index=True)
    web_result_id = Column(
        Integer, ForeignKey("web_results.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<EmailCapture {self.email} via {self.prelanding_key}>"
