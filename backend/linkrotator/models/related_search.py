from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, func
from ..database import Base


class RelatedSearch(Base):
    """Landing page button routing to a numbered web-results page"""
    __tablename__ = "related_searches"

    id = Column(Integer, primary_key=True, index=True)
    search_text = Column(String(255), nullable=False)
    title = Column(String(255), nullable=True)
    web_result_page = Column(Integer, nullable=False, default=1)
    position = Column(Integer, nullable=False, default=1)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    # use_alter breaks the blogs <-> related_searches cycle at create time
    blog_id = Column(
        Integer,
        ForeignKey("blogs.id", ondelete="SET NULL", use_alter=True,
                   name="fk_related_searches_blog_id"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<RelatedSearch {self.search_text} -> page {self.web_result_page}>"
