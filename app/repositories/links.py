"""
Join-table persistence shared by project_documents and podcast_documents.

A link row holds a parent id, a document id and the document's position
under that parent; child_ids returns documents in position order. Replacing
a parent's links is delete-all followed by insert; the two steps are not atomic.
"""

from typing import Callable, Dict, List, Sequence

from pydantic import BaseModel

from app.repositories.base import Table


class LinkRepository:
    def __init__(self, table: Table, parent_field: str, make_link: Callable[[str, str, int], BaseModel]):
        self.table = table
        self.parent_field = parent_field
        self.make_link = make_link

    async def child_ids(self, parent_id: str) -> List[str]:
        rows = await self.table.select({self.parent_field: parent_id}, order_by="position")
        return [row.document_id for row in rows]

    async def parent_ids_by_child(self, document_ids: Sequence[str]) -> Dict[str, List[str]]:
        """Map each document id to the parents it is linked to."""
        if not document_ids:
            return {}
        rows = await self.table.select({"document_id": list(document_ids)})
        mapping: Dict[str, List[str]] = {}
        for row in rows:
            mapping.setdefault(row.document_id, []).append(getattr(row, self.parent_field))
        return mapping

    async def add(self, parent_id: str, document_ids: Sequence[str]) -> int:
        """Append links after any existing ones; a repeated id is linked once."""
        existing = await self.table.select({self.parent_field: parent_id})
        start = max((row.position for row in existing), default=-1) + 1
        links = [
            self.make_link(parent_id, d, start + i) for i, d in enumerate(dict.fromkeys(document_ids))
        ]
        await self.table.insert(links)
        return len(links)

    async def replace(self, parent_id: str, document_ids: Sequence[str]) -> int:
        await self.delete_for_parent(parent_id)
        return await self.add(parent_id, document_ids)

    async def delete_for_parent(self, parent_id: str) -> int:
        return await self.table.delete({self.parent_field: parent_id})

    async def delete_for_child(self, document_id: str) -> int:
        return await self.table.delete({"document_id": document_id})
