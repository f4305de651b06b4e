from __future__ import annotations

from typing import Protocol

from rijig_web.application.dto.trash import CreateTrashCategoryInput, UpdateTrashCategoryInput
from rijig_web.domain.entities.trash import TrashCategory


class TrashCategoryPort(Protocol):
    def list_categories(self) -> list[TrashCategory]:
        ...

    def create_category(self, command: CreateTrashCategoryInput) -> str:
        ...

    def update_category(self, command: UpdateTrashCategoryInput) -> str:
        ...

    def delete_category(self, *, category_id: str) -> str:
        ...
