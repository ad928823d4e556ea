from docvault.db.repositories.revision_repository import RevisionRepository

__all__ = [
    "RevisionRepository"
]
