"""In-memory store for uploaded tax documents."""

import logging
import secrets
import string
import threading
import time
from collections.abc import Iterable
from datetime import datetime

from filing_buddy.exceptions import InputError
from filing_buddy.models.documents import DocumentType, TaxDocument, parse_document_type
from filing_buddy.storage.redaction import hash_content
from filing_buddy.utils import get_enum_value

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_document_id() -> str:
    """Generate an id of the form ``doc_<ms timestamp>_<9 random chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"doc_{int(time.time() * 1000)}_{suffix}"


class DocumentStore:
    """Keyed store of immutable TaxDocuments, owned by a single session.

    Writers are serialized by a lock; each document is fully built before
    it is published, so readers never see a partial record.
    """

    def __init__(self) -> None:
        self._documents: dict[str, TaxDocument] = {}
        self._lock = threading.Lock()

    def put(
        self,
        filename: str,
        content: str,
        document_type: DocumentType | str | None,
    ) -> str:
        """
        Store a new document.

        Args:
            filename: Original filename
            content: Raw document text
            document_type: Document type (unknown values become OTHER, blank stays unset)

        Returns:
            The generated document id

        Raises:
            InputError: If the filename or content is not text
        """
        if not isinstance(filename, str):
            raise InputError("Document filename is required")
        if not isinstance(content, str):
            raise InputError("Document content is required")

        with self._lock:
            document_id = generate_document_id()
            while document_id in self._documents:
                document_id = generate_document_id()

            document = TaxDocument(
                id=document_id,
                document_type=parse_document_type(document_type),
                filename=filename,
                content=content,
                content_hash=hash_content(content),
                uploaded_at=datetime.now(),
            )
            self._documents[document_id] = document

        type_name = get_enum_value(document.document_type) or "untyped"
        logger.info(f"Stored document {document_id} ({type_name}, {filename})")
        return document_id

    def get(self, document_id: str) -> TaxDocument | None:
        """Get a document by id, or None if it does not exist."""
        return self._documents.get(document_id)

    def get_many(self, document_ids: Iterable[str]) -> list[TaxDocument]:
        """Get the documents that exist, in request order. Unknown ids are skipped."""
        found = []
        for document_id in document_ids:
            document = self._documents.get(document_id)
            if document is not None:
                found.append(document)
        return found

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    def __len__(self) -> int:
        return len(self._documents)
