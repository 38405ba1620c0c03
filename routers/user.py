"""
受保护的用户路由，身份由 AuthMiddleware 注入
"""
from typing import Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from auth.dependencies import get_current_identity
from auth.tokens import Identity

router = APIRouter(tags=["用户"])


class UserResponse(BaseModel):
    msg: str
    user_id: Union[int, str]


@router.get("/user", response_model=UserResponse)
def get_user(identity: Identity = Depends(get_current_identity)) -> UserResponse:
    return UserResponse(msg="Hello there!", user_id=identity)
