from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text

from shortener.codes import MAX_CODE_LENGTH
from shortener.database import Base


class Link(Base):
    __tablename__ = "links"
    __table_args__ = (CheckConstraint("hits >= 0", name="ck_links_hits_non_negative"),)

    code = Column(String(MAX_CODE_LENGTH), primary_key=True)
    original_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    hits = Column(Integer, nullable=False, default=0, server_default="0")

    def __repr__(self):
        return f"<Link {self.code} -> {self.original_url} hits={self.hits}>"
