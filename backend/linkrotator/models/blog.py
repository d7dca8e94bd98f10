from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from ..database import Base

BLOG_STATUS_DRAFT = "draft"
BLOG_STATUS_PUBLISHED = "published"


class Blog(Base):
    """Public content page with related-search shortcuts"""
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    author = Column(String(255), nullable=True)
    category = Column(String(255), nullable=True)
    content = Column(Text, nullable=True)
    featured_image = Column(Text, nullable=True)  # URL or data: URI
    status = Column(String(20), nullable=False, default=BLOG_STATUS_DRAFT)
    related_search_id = Column(
        Integer, ForeignKey("related_searches.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Blog {self.slug} ({self.status})>"
