"""Project persistence."""

from typing import Any, List, Optional

from app.models.base import utcnow
from app.models.project import Project
from app.repositories.base import Table


class ProjectRepository:
    def __init__(self, table: Table[Project]):
        self.table = table

    async def create(self, project: Project) -> Project:
        await self.table.insert([project])
        return project

    async def get(self, project_id: str, user_id: str) -> Optional[Project]:
        rows = await self.table.select({"id": project_id, "user_id": user_id})
        return rows[0] if rows else None

    async def list_for_user(self, user_id: str) -> List[Project]:
        return await self.table.select({"user_id": user_id}, order_by="created_at", descending=True)

    async def update(self, project_id: str, user_id: str, **values: Any) -> Optional[Project]:
        values["updated_at"] = utcnow()
        if not await self.table.update({"id": project_id, "user_id": user_id}, values):
            return None
        return await self.get(project_id, user_id)

    async def delete(self, project_id: str, user_id: str) -> bool:
        return await self.table.delete({"id": project_id, "user_id": user_id}) > 0
