"""
FastAPI authentication + authorization helpers.

This centralizes:
- Token -> current user dependency
- Standard role-based route guards (dependencies)
- Access checks for routes addressing a student's data by id
"""

from __future__ import annotations

from typing import Optional, Union

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from edumorph.core.models import ConsentPurpose, UserProfile, UserRole
from edumorph.core.roles import has_role, role_str
from edumorph.core.services.auth import AuthService, get_auth_service
from edumorph.core.services.privacy_shield_service import (
    PrivacyShieldService,
    get_privacy_shield_service,
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
oauth2_scheme_optional = OAuth2PasswordBearer(
    tokenUrl="/api/auth/login", auto_error=False
)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserProfile:
    user = auth_service.validate_token(token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_current_user(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[UserProfile]:
    """Return user if token is valid, otherwise None (no 401)."""
    if not token:
        return None
    return auth_service.validate_token(token)


RoleInput = Union[UserRole, str]


def require_roles(*roles: RoleInput):
    """
    Dependency factory that enforces role membership and returns ``current_user``.

    Usage:
        current_user: UserProfile = Depends(require_roles(UserRole.STUDENT))
    """

    def _dep(current_user: UserProfile = Depends(get_current_user)) -> UserProfile:
        if not has_role(current_user, *roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized"
            )
        return current_user

    return _dep


def require_student(
    current_user: UserProfile = Depends(require_roles(UserRole.STUDENT)),
) -> UserProfile:
    return current_user


def ensure_can_view_student(
    current_user: UserProfile,
    student_id: str,
    privacy_service: PrivacyShieldService,
) -> None:
    """
    Students may only address their own data. Teachers need the student's
    teacher-view consent; admins are always allowed.
    """
    if current_user.uid == student_id:
        return
    if has_role(current_user, UserRole.ADMIN):
        return
    if has_role(current_user, UserRole.TEACHER):
        if privacy_service.has_consent(student_id, ConsentPurpose.TEACHER_VIEW):
            return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student has not shared data with teachers",
        )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")


def student_access(
    student_id: str,
    current_user: UserProfile = Depends(get_current_user),
    privacy_service: PrivacyShieldService = Depends(get_privacy_shield_service),
) -> str:
    """Path dependency: returns ``student_id`` once the caller may view it."""
    ensure_can_view_student(current_user, student_id, privacy_service)
    return student_id


def user_role_str(user: UserProfile) -> str:
    """Canonical role string for API responses."""
    return role_str(user)
