from sqlalchemy import BigInteger, Boolean, Column, String, Text, UniqueConstraint

from docvault.db.base import BaseModel


class DocumentRevision(BaseModel):
    """Одна ревизия документа; надгробие - строка с deleted=True и без содержимого"""
    __tablename__ = "document_revisions"
    __table_args__ = (
        UniqueConstraint("collection", "key", "marker", name="uq_document_revisions_marker"),
    )

    collection = Column(String(255), nullable=False, default="_default")
    key = Column(String(250), nullable=False)
    marker = Column(BigInteger, nullable=False)
    content = Column(Text, nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)
