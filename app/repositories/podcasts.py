"""Podcast persistence."""

from typing import Any, List, Optional

from app.models.base import utcnow
from app.models.podcast import Podcast, PodcastStatus
from app.repositories.base import Filters, Table


class PodcastRepository:
    def __init__(self, table: Table[Podcast]):
        self.table = table

    async def create(self, podcast: Podcast) -> Podcast:
        await self.table.insert([podcast])
        return podcast

    async def get(self, podcast_id: str, user_id: Optional[str] = None) -> Optional[Podcast]:
        filters: Filters = {"id": podcast_id}
        if user_id is not None:
            filters["user_id"] = user_id
        rows = await self.table.select(filters)
        return rows[0] if rows else None

    async def list_for_user(
        self,
        user_id: str,
        status: Optional[PodcastStatus] = None,
        project_id: Optional[str] = None,
    ) -> List[Podcast]:
        filters: Filters = {"user_id": user_id}
        if status is not None:
            filters["status"] = status
        if project_id is not None:
            filters["project_id"] = project_id
        return await self.table.select(filters, order_by="created_at", descending=True)

    async def update(self, podcast_id: str, **values: Any) -> bool:
        values["updated_at"] = utcnow()
        return await self.table.update({"id": podcast_id}, values) > 0

    async def detach_project(self, project_id: str, user_id: str) -> int:
        """Clear project_id on every podcast of a deleted project."""
        return await self.table.update(
            {"project_id": project_id, "user_id": user_id},
            {"project_id": None, "updated_at": utcnow()},
        )

    async def delete(self, podcast_id: str, user_id: Optional[str] = None) -> bool:
        filters: Filters = {"id": podcast_id}
        if user_id is not None:
            filters["user_id"] = user_id
        return await self.table.delete(filters) > 0
