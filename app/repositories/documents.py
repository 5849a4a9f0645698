"""Document persistence, always scoped to the owning user."""

from typing import Any, List, Optional, Sequence

from app.models.base import utcnow
from app.models.document import Document, DocumentStatus
from app.repositories.base import Filters, Table


class DocumentRepository:
    def __init__(self, table: Table[Document]):
        self.table = table

    async def create(self, document: Document) -> Document:
        await self.table.insert([document])
        return document

    async def get(self, document_id: str, user_id: str) -> Optional[Document]:
        rows = await self.table.select({"id": document_id, "user_id": user_id})
        return rows[0] if rows else None

    async def list_for_user(
        self,
        user_id: str,
        status: Optional[DocumentStatus] = None,
        document_ids: Optional[Sequence[str]] = None,
    ) -> List[Document]:
        """Newest first."""
        filters: Filters = {"user_id": user_id}
        if status is not None:
            filters["status"] = status
        if document_ids is not None:
            filters["id"] = list(document_ids)
        return await self.table.select(filters, order_by="created_at", descending=True)

    async def list_processed(self, document_ids: Sequence[str], user_id: str) -> List[Document]:
        """
        Processed documents among document_ids owned by user_id, in the order the
        ids were given. Unprocessed or foreign ids are silently left out.
        """
        rows = await self.table.select(
            {"id": list(document_ids), "user_id": user_id, "status": DocumentStatus.PROCESSED}
        )
        by_id = {row.id: row for row in rows}
        ordered: List[Document] = []
        for document_id in dict.fromkeys(document_ids):
            if document_id in by_id:
                ordered.append(by_id[document_id])
        return ordered

    async def owned_ids(self, document_ids: Sequence[str], user_id: str) -> List[str]:
        """Subset of document_ids owned by user_id, keeping the given order."""
        rows = await self.table.select({"id": list(document_ids), "user_id": user_id})
        owned = {row.id for row in rows}
        return [d for d in dict.fromkeys(document_ids) if d in owned]

    async def update(self, document_id: str, **values: Any) -> bool:
        values["updated_at"] = utcnow()
        return await self.table.update({"id": document_id}, values) > 0

    async def delete(self, document_id: str, user_id: str) -> bool:
        return await self.table.delete({"id": document_id, "user_id": user_id}) > 0
