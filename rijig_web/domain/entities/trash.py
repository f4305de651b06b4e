from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TrashCategory:
    id: str
    trash_name: str
    trash_icon: str
    estimated_price: float
    variety: str
    created_at: str
    updated_at: str
