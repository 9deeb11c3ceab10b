"""
Generation Repository

CRUD for uploaded documents and the generations run against them.

A Generation is written twice in its life: once when it is created in the
``processing`` state and once when it reaches ``completed`` or ``failed``.
The second write is a single conditional UPDATE, so a reader sees either the
row before or after it and a terminal row is never overwritten.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storygen.database.models import Document, Generation, GenerationStatus

logger = logging.getLogger(__name__)


class GenerationRepository:

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # Documents
    # =========================================================================

    def create_document(self, filename: str, content: str) -> Document:
        document = Document(filename=filename, content=content)
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)
        logger.info(f"Created document {document.id} ({filename}, {len(content)} chars)")
        return document

    def get_document(self, document_id: int) -> Optional[Document]:
        return self.db.get(Document, document_id)

    def create_document_with_generation(self, filename: str, content: str) -> Tuple[Document, Generation]:
        """Store a document and its first processing generation in one transaction.

        Either both rows are committed or, on any failure, neither is.
        """
        try:
            document = Document(filename=filename, content=content)
            self.db.add(document)
            self.db.flush()
            generation = self._new_generation(document.id)
            self.db.add(generation)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(document)
        self.db.refresh(generation)
        logger.info(f"Created document {document.id} ({filename}, {len(content)} chars) with generation {generation.id}")
        return document, generation

    # =========================================================================
    # Generations
    # =========================================================================

    def create_generation(
        self,
        document_id: int,
        epics: Any = None,
        status: GenerationStatus = GenerationStatus.PROCESSING,
    ) -> Generation:
        generation = self._new_generation(document_id, epics, status)
        self.db.add(generation)
        self.db.commit()
        self.db.refresh(generation)
        logger.info(f"Created generation {generation.id} for document {document_id}")
        return generation

    def _new_generation(
        self,
        document_id: int,
        epics: Any = None,
        status: GenerationStatus = GenerationStatus.PROCESSING,
    ) -> Generation:
        return Generation(
            document_id=document_id,
            epics=epics if epics is not None else {},
            status=GenerationStatus(status).value,
        )

    def get_generation(self, generation_id: int) -> Optional[Generation]:
        return self.db.get(Generation, generation_id)

    def get_generations_by_document(self, document_id: int) -> List[Generation]:
        """All generations for a document, oldest first."""
        stmt = (
            select(Generation)
            .where(Generation.document_id == document_id)
            .order_by(Generation.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def update_generation_status(
        self,
        generation_id: int,
        status: GenerationStatus,
        epics: Any = None,
        completed_at: Optional[datetime] = None,
    ) -> Optional[Generation]:
        """
        Move a processing generation to a terminal status.

        Args:
            generation_id: Generation to update
            status: ``completed`` or ``failed``
            epics: New result payload, left untouched when None
            completed_at: Completion timestamp, left untouched when None

        Returns:
            The updated Generation, or None if it does not exist or has
            already left the processing state.

        Raises:
            ValueError: If ``status`` is not a terminal status
        """
        status = GenerationStatus(status)
        if not status.is_terminal:
            raise ValueError(f"Cannot move a generation to non-terminal status {status.value!r}")

        values = {"status": status.value}
        if epics is not None:
            values["epics"] = epics
        if completed_at is not None:
            values["completed_at"] = completed_at

        stmt = (
            update(Generation)
            .where(Generation.id == generation_id)
            .where(Generation.status == GenerationStatus.PROCESSING.value)
            .values(**values)
        )
        result = self.db.execute(stmt)
        self.db.commit()

        if result.rowcount == 0:
            logger.warning(f"Generation {generation_id} not updated to {status.value}: missing or already terminal")
            return None

        logger.info(f"Generation {generation_id} -> {status.value}")
        return self.get_generation(generation_id)
