"""FastAPI routes for registration, login and identity."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from accounts import UserRecord
from api.deps import Services, current_user, get_services
from api.schemas import AuthResp, LoginReq, RegisterReq, UserOut


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResp, status_code=201)
def register(payload: RegisterReq, services: Services = Depends(get_services)) -> AuthResp:
    user, token = services.accounts.register(payload.email, payload.password, payload.name)
    return AuthResp(token=token, user=UserOut.from_record(user))


@router.post("/login", response_model=AuthResp)
def login(payload: LoginReq, services: Services = Depends(get_services)) -> AuthResp:
    user, token = services.accounts.login(payload.email, payload.password)
    return AuthResp(token=token, user=UserOut.from_record(user))


@router.get("/me", response_model=UserOut)
def me(user: UserRecord = Depends(current_user)) -> UserOut:
    return UserOut.from_record(user)
