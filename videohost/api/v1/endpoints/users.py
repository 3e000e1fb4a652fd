from fastapi import APIRouter

from videohost.api.v1.dependencies import CurrentUser
from videohost.models.user import UserResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse, summary="Caller's likes, dislikes and history")
async def read_current_user(current_user: CurrentUser):
    return UserResponse.from_user(current_user)
