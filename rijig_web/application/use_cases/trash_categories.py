from __future__ import annotations

from decimal import Decimal, InvalidOperation

from rijig_web.application.dto.trash import CreateTrashCategoryInput, UpdateTrashCategoryInput
from rijig_web.application.ports.trash_category_port import TrashCategoryPort
from rijig_web.domain.entities.trash import TrashCategory

from .auth_common import raise_if_errors


def _category_errors(*, name: str, variety: str, estimated_price: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not name.strip():
        errors["name"] = "Nama kategori wajib diisi"
    if not variety.strip():
        errors["variety"] = "Jenis sampah wajib diisi"
    try:
        if Decimal(estimated_price) < 0:
            errors["estimated_price"] = "Harga estimasi tidak boleh negatif"
    except InvalidOperation:
        errors["estimated_price"] = "Harga estimasi harus berupa angka"
    return errors


class ManageTrashCategoriesUseCase:
    def __init__(self, *, trash_category_port: TrashCategoryPort):
        self._trash_category_port = trash_category_port

    def list_categories(self) -> list[TrashCategory]:
        return self._trash_category_port.list_categories()

    def create_category(self, command: CreateTrashCategoryInput) -> str:
        errors = _category_errors(
            name=command.name,
            variety=command.variety,
            estimated_price=command.estimated_price,
        )
        if command.icon is None or not command.icon.content:
            errors["icon"] = "Ikon kategori wajib diunggah"
        raise_if_errors(errors)
        return self._trash_category_port.create_category(command)

    def update_category(self, command: UpdateTrashCategoryInput) -> str:
        raise_if_errors(
            _category_errors(
                name=command.name,
                variety=command.variety,
                estimated_price=command.estimated_price,
            )
        )
        return self._trash_category_port.update_category(command)

    def delete_category(self, *, category_id: str) -> str:
        return self._trash_category_port.delete_category(category_id=category_id)
