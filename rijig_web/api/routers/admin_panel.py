from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from rijig_web.api.deps import (
    get_approval_details_use_case,
    get_load_approval_board_use_case,
    get_manage_trash_categories_use_case,
    get_perform_approval_action_use_case,
    require_role,
)
from rijig_web.api.errors import api_error_response, form_errors_response
from rijig_web.api.schemas.approval import (
    ApprovalActionResponse,
    ApprovalBoardResponse,
    PendingUserResponse,
    to_approval_board_response,
    to_pending_user_response,
)
from rijig_web.api.schemas.auth import MessageResponse
from rijig_web.api.schemas.session import SessionSummaryResponse, to_session_summary
from rijig_web.api.schemas.trash import TrashCategoryResponse
from rijig_web.api.uploads import to_uploaded_file
from rijig_web.application.dto.approval import ApprovalActionInput
from rijig_web.application.dto.trash import CreateTrashCategoryInput, UpdateTrashCategoryInput
from rijig_web.application.use_cases.approval_board import (
    DEFAULT_PAGE_SIZE,
    GetApprovalDetailsUseCase,
    LoadApprovalBoardUseCase,
    PerformApprovalActionUseCase,
)
from rijig_web.application.use_cases.trash_categories import ManageTrashCategoriesUseCase
from rijig_web.domain.entities.session import SessionData
from rijig_web.domain.exceptions import ApiError, FormValidationError
from rijig_web.domain.services.onboarding import ADMIN_DASHBOARD_PATH


router = APIRouter(prefix=ADMIN_DASHBOARD_PATH)

require_administrator = require_role("administrator")


@router.get("", response_model=SessionSummaryResponse)
def admin_dashboard(session: SessionData = Depends(require_administrator)):
    return to_session_summary(session)


@router.get("/users", response_model=ApprovalBoardResponse)
def list_pending_users(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    _session: SessionData = Depends(require_administrator),
    use_case: LoadApprovalBoardUseCase = Depends(get_load_approval_board_use_case),
):
    return to_approval_board_response(use_case.execute(page=page, limit=limit))


@router.get("/users/{user_id}", response_model=PendingUserResponse)
def get_pending_user(
    user_id: str,
    _session: SessionData = Depends(require_administrator),
    use_case: GetApprovalDetailsUseCase = Depends(get_approval_details_use_case),
):
    user = use_case.execute(user_id=user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="Pengguna tidak ditemukan")
    return to_pending_user_response(user)


@router.post("/users/approval", response_model=ApprovalActionResponse)
def perform_approval_action(
    user_id: str = Form(""),
    action: str = Form(""),
    _session: SessionData = Depends(require_administrator),
    load_use_case: LoadApprovalBoardUseCase = Depends(get_load_approval_board_use_case),
    action_use_case: PerformApprovalActionUseCase = Depends(get_perform_approval_action_use_case),
):
    board = load_use_case.execute()
    try:
        output = action_use_case.execute(board, ApprovalActionInput(user_id=user_id, action=action))
    except FormValidationError as exc:
        return form_errors_response(exc)

    response = ApprovalActionResponse(
        success=output.success,
        board=to_approval_board_response(output.board),
        new_status=output.result.new_status if output.result is not None else None,
        error=output.error,
    )
    if not output.success:
        return JSONResponse(response.model_dump(), status_code=400)
    return response


@router.get("/waste", response_model=list[TrashCategoryResponse])
def list_trash_categories(
    _session: SessionData = Depends(require_administrator),
    use_case: ManageTrashCategoriesUseCase = Depends(get_manage_trash_categories_use_case),
):
    return [
        TrashCategoryResponse(
            id=category.id,
            trash_name=category.trash_name,
            trash_icon=category.trash_icon,
            estimated_price=category.estimated_price,
            variety=category.variety,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )
        for category in use_case.list_categories()
    ]


@router.post("/waste", response_model=MessageResponse)
def create_trash_category(
    name: str = Form(""),
    variety: str = Form(""),
    estimated_price: str = Form(""),
    icon: UploadFile | None = File(None),
    _session: SessionData = Depends(require_administrator),
    use_case: ManageTrashCategoriesUseCase = Depends(get_manage_trash_categories_use_case),
):
    try:
        message = use_case.create_category(
            CreateTrashCategoryInput(
                name=name.strip(),
                variety=variety.strip(),
                estimated_price=estimated_price.strip(),
                icon=to_uploaded_file(icon),
            )
        )
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc)
    return MessageResponse(message=message or "Kategori berhasil ditambahkan")


@router.post("/waste/{category_id}", response_model=MessageResponse)
def update_trash_category(
    category_id: str,
    name: str = Form(""),
    variety: str = Form(""),
    estimated_price: str = Form(""),
    icon: UploadFile | None = File(None),
    _session: SessionData = Depends(require_administrator),
    use_case: ManageTrashCategoriesUseCase = Depends(get_manage_trash_categories_use_case),
):
    try:
        message = use_case.update_category(
            UpdateTrashCategoryInput(
                category_id=category_id,
                name=name.strip(),
                variety=variety.strip(),
                estimated_price=estimated_price.strip(),
                icon=to_uploaded_file(icon),
            )
        )
    except FormValidationError as exc:
        return form_errors_response(exc)
    except ApiError as exc:
        return api_error_response(exc)
    return MessageResponse(message=message or "Kategori berhasil diperbarui")


@router.post("/waste/{category_id}/delete", response_model=MessageResponse)
def delete_trash_category(
    category_id: str,
    _session: SessionData = Depends(require_administrator),
    use_case: ManageTrashCategoriesUseCase = Depends(get_manage_trash_categories_use_case),
):
    try:
        message = use_case.delete_category(category_id=category_id)
    except ApiError as exc:
        return api_error_response(exc)
    return MessageResponse(message=message or "Kategori berhasil dihapus")
