"""External collaborator clients."""
from integrations.document_store import DocumentStore, LocalDocumentStore, UploadedFile

__all__ = ["DocumentStore", "LocalDocumentStore", "UploadedFile"]
