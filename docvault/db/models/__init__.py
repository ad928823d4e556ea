from docvault.db.models.revision import DocumentRevision

__all__ = [
    "DocumentRevision"
]
