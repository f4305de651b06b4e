from __future__ import annotations

from rijig_web.application.dto.auth import UploadedFile
from rijig_web.application.dto.trash import CreateTrashCategoryInput, UpdateTrashCategoryInput
from rijig_web.application.ports.trash_category_port import TrashCategoryPort
from rijig_web.domain.entities.trash import TrashCategory

from .rijig_api_client import RijigApiClient
from .rijig_mappers import ensure_ok, to_trash_category


def _icon_files(icon: UploadedFile | None) -> dict | None:
    if icon is None:
        return None
    return {"icon": (icon.filename, icon.content, icon.content_type)}


class TrashCategoryGateway(TrashCategoryPort):
    def __init__(self, client: RijigApiClient):
        self._client = client

    def list_categories(self) -> list[TrashCategory]:
        response = ensure_ok(self._client.get("/trash/category"))
        return [to_trash_category(row) for row in response.data or []]

    def create_category(self, command: CreateTrashCategoryInput) -> str:
        response = self._client.post(
            "/trash/category/with-icon",
            data={
                "name": command.name,
                "variety": command.variety,
                "estimated_price": command.estimated_price,
            },
            files=_icon_files(command.icon),
        )
        return ensure_ok(response).message

    def update_category(self, command: UpdateTrashCategoryInput) -> str:
        response = self._client.put(
            f"/trash/category/{command.category_id}/with-icon",
            data={
                "name": command.name,
                "variety": command.variety,
                "estimated_price": command.estimated_price,
            },
            files=_icon_files(command.icon),
        )
        return ensure_ok(response).message

    def delete_category(self, *, category_id: str) -> str:
        return ensure_ok(self._client.delete(f"/trash/category/{category_id}")).message
