"""Tests for document attachment and the local document store."""
import pytest
from sqlalchemy.exc import OperationalError

from exceptions import DatabaseError, DocumentStorageError, ForbiddenError, InvalidInputError, NotFoundError
from integrations.document_store import UploadedFile
from repositories import DocumentRepository
from services import DocumentService, TransferLedger


@pytest.fixture
def documents(db_session, store):
    return DocumentService(db_session, store)


def test_store_writes_under_documents_dir(store):
    path = store.store(b"%PDF", "invoice.PDF")

    assert path.startswith("/uploads/documents/")
    assert path.endswith(".PDF")
    assert (store.documents_dir / path.rsplit("/", 1)[-1]).read_bytes() == b"%PDF"


def test_store_rejects_empty_and_oversize(store):
    with pytest.raises(DocumentStorageError):
        store.store(b"", "empty.txt")
    with pytest.raises(DocumentStorageError):
        store.store(b"x" * 2048, "big.bin")


def test_delete_rejects_foreign_paths(store):
    with pytest.raises(DocumentStorageError):
        store.delete("/etc/passwd")


def test_attach_reports_partial_failures(documents, container, alice):
    result = documents.attach_to_container(
        alice,
        container.id,
        [
            UploadedFile(filename="bill.pdf", content=b"bill"),
            UploadedFile(filename="huge.pdf", content=b"x" * 4096),
            UploadedFile(filename="empty.pdf", content=b""),
        ],
    )

    assert [doc["original_name"] for doc in result["uploaded"]] == ["bill.pdf"]
    assert {f["original_name"] for f in result["failed"]} == {"huge.pdf", "empty.pdf"}
    assert len(documents.list_for_container(container.id, alice)) == 1


def test_attach_failure_leaves_container_intact(documents, lifecycle, container, alice):
    result = documents.attach_to_container(
        alice, container.id, [UploadedFile(filename="huge.pdf", content=b"x" * 4096)]
    )

    assert result["uploaded"] == []
    assert lifecycle.get_container(container.id, alice).grand_total == 365.0


def test_attach_checks_access_and_type(documents, container, bob, alice):
    with pytest.raises(ForbiddenError):
        documents.attach_to_container(bob, container.id, [])
    with pytest.raises(InvalidInputError):
        documents.attach_to_container(alice, container.id, [], doc_type="selfie")
    with pytest.raises(NotFoundError):
        documents.attach_to_container(alice, 999, [])


def test_attach_to_transfer_tags_container(documents, container, alice, vendor, db_session):
    transfer = TransferLedger(db_session).create(
        alice, vendor_id=vendor.id, container_id=container.id,
        amount=5, transfer_type="hand", transfer_date="2025-03-03",
    )

    result = documents.attach_to_transfer(
        alice, transfer.id, [UploadedFile(filename="receipt.jpg", content=b"jpg")]
    )

    uploaded = result["uploaded"][0]
    assert uploaded["transfer_id"] == transfer.id
    assert uploaded["container_id"] == container.id
    assert uploaded["type"] == "transfer"


def test_container_delete_removes_files(documents, lifecycle, container, alice, store):
    result = documents.attach_to_container(
        alice, container.id, [UploadedFile(filename="bill.pdf", content=b"bill")]
    )
    stored = store.documents_dir / result["uploaded"][0]["filename"]
    assert stored.exists()

    lifecycle.delete(container.id, alice)

    assert not stored.exists()


def test_attach_removes_stored_files_when_insert_fails(documents, container, alice, store, monkeypatch):
    def fail_insert(self, entities):
        raise OperationalError("INSERT INTO documents", {}, Exception("disk I/O error"))

    monkeypatch.setattr(DocumentRepository, "bulk_create", fail_insert)

    with pytest.raises(DatabaseError):
        documents.attach_to_container(
            alice, container.id, [UploadedFile(filename="bill.pdf", content=b"bill")]
        )

    assert list(store.documents_dir.iterdir()) == []
    assert documents.list_for_container(container.id, alice) == []
