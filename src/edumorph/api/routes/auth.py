from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr

from edumorph.core.exceptions import AuthenticationError
from edumorph.core.models import UserProfile, UserRole
from edumorph.core.roles import parse_user_role
from edumorph.core.services.auth import AuthService, get_auth_service
from edumorph.api.security import get_current_user, get_optional_current_user

# Models


class UserRegister(BaseModel):
    email: EmailStr
    password: str
    display_name: str
    role: str = "student"
    grade: Optional[str] = None
    subjects: Optional[List[str]] = None


class Token(BaseModel):
    access_token: str
    token_type: str
    expires_at: datetime
    user: dict


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=dict)
async def register(
    user_data: UserRegister,
    current_user: Optional[UserProfile] = Depends(get_optional_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    role_enum = parse_user_role(user_data.role)
    if role_enum is None:
        raise HTTPException(status_code=400, detail=f"Unknown role: {user_data.role}")

    # Role-based creation policy:
    # - Unauthenticated self-registration: teacher/student only
    # - Admins can create any role
    # - Teachers can create students only
    # - Students cannot create users
    if current_user is None:
        if role_enum == UserRole.ADMIN:
            raise HTTPException(
                status_code=403,
                detail="Admin account creation requires authentication",
            )
    elif current_user.role == UserRole.ADMIN:
        pass
    elif current_user.role == UserRole.TEACHER:
        if role_enum != UserRole.STUDENT:
            raise HTTPException(
                status_code=403, detail="Teachers can only create student accounts"
            )
    else:
        raise HTTPException(
            status_code=403, detail="Students cannot create user accounts"
        )

    try:
        user = auth_service.register_user(
            email=str(user_data.email),
            password=user_data.password,
            display_name=user_data.display_name,
            role=role_enum,
            grade=user_data.grade,
            subjects=user_data.subjects,
        )
    except AuthenticationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return user.to_public_dict()


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth_service: AuthService = Depends(get_auth_service),
):
    # OAuth2 form: the username field carries the email address
    try:
        result = auth_service.login_user(form_data.username, form_data.password)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {
        "access_token": result["token"],
        "token_type": "bearer",
        "expires_at": result["expires_at"],
        "user": result["user"].to_public_dict(),
    }


@router.get("/me", response_model=dict)
async def read_users_me(current_user: UserProfile = Depends(get_current_user)):
    return current_user.to_public_dict()
