from typing import List, Union

from marvin.execution.executor import RequestExecutor
from marvin.models.tasks import Category, Label, Project, parse_category_or_project


class OrganizationApi:
    """Категории, проекты и метки."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def get_categories(self) -> List[Union[Category, Project]]:
        data = await self.executor.get("/categories")
        return [parse_category_or_project(item) for item in data]

    async def get_only_categories(self) -> List[Category]:
        items = await self.get_categories()
        return [item for item in items if isinstance(item, Category)]

    async def get_only_projects(self) -> List[Project]:
        items = await self.get_categories()
        return [item for item in items if isinstance(item, Project)]

    async def get_labels(self) -> List[Label]:
        data = await self.executor.get("/labels")
        return [Label.model_validate(item) for item in data]
