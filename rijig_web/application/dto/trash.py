from __future__ import annotations

from dataclasses import dataclass

from .auth import UploadedFile


@dataclass(frozen=True)
class CreateTrashCategoryInput:
    name: str
    variety: str
    estimated_price: str
    icon: UploadedFile | None = None


@dataclass(frozen=True)
class UpdateTrashCategoryInput:
    category_id: str
    name: str
    variety: str
    estimated_price: str
    icon: UploadedFile | None = None
