from fastapi import APIRouter
from starlette import status
from utils.deps import db_dependency, user_dependency
from schemas.admin_schemas import ModifyUserRequest, GetUserRequest
from services.admin_user_service import AdminUserService


router = APIRouter(
    prefix="/admin/user",
    tags=["admin"]
)


@router.put("/modify", status_code=status.HTTP_200_OK)
async def modify_user(body: ModifyUserRequest, user: user_dependency, db: db_dependency):
    """
    Changes username, email and/or role. The user has to log in again.
    """
    updated = AdminUserService.modify_user(body, db)

    return {"message": "User modified successfully", **AdminUserService.to_dict(updated)}


@router.post("/getbyid", status_code=status.HTTP_200_OK)
async def get_user_by_id(body: GetUserRequest, user: user_dependency, db: db_dependency):
    return AdminUserService.to_dict(AdminUserService.get_user(body.user_id, db))
