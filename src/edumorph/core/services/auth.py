"""
Authentication service for EduMorph
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

import jwt

from ..exceptions import AuthenticationError
from ..models import Collection, UserProfile, UserRole, format_timestamp, utc_now
from ..roles import normalize_role, parse_user_role
from ..security_utils import sanitize_label
from .document_store import DocumentStore, get_document_store
from .logging import get_logging_service
from .settings_config_service import get_settings_service

PASSWORD_SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


class AuthService:
    """Authentication and authorization service"""

    def __init__(self, store: Optional[DocumentStore] = None):
        # Use persistent JWT secret from security_utils
        from ..security_utils import get_or_create_jwt_secret

        settings = get_settings_service()
        self.store = store or get_document_store()
        self.logging_service = get_logging_service()
        self.jwt_secret = get_or_create_jwt_secret()
        self.jwt_algorithm = "HS256"
        self.token_expiry_minutes = settings.getint(
            "security", "token_expiry_minutes", 30
        )
        self.password_min_length = settings.getint(
            "security", "password_min_length", 8
        )

    def register_user(
        self,
        email: str,
        password: str,
        display_name: str,
        role: Union[UserRole, str] = UserRole.STUDENT,
        grade: Optional[str] = None,
        subjects: Optional[List[str]] = None,
    ) -> UserProfile:
        """Register a new user"""
        if not self.validate_password(password):
            raise AuthenticationError(
                f"Password must be at least {self.password_min_length} characters "
                "and contain uppercase, lowercase, digit, and special character"
            )

        user_role = parse_user_role(role)
        if user_role is None:
            raise AuthenticationError(f"Unknown role: {role}")

        email = email.strip().lower()
        if self._find_user_by_email(email) is not None:
            raise AuthenticationError("Email already exists")

        from ..security import hash_password

        user = UserProfile(
            uid=uuid.uuid4().hex,
            email=email,
            display_name=sanitize_label(display_name),
            role=user_role,
            created_at=utc_now(),
            grade=grade,
            subjects=subjects,
            password_hash=hash_password(password),
        )
        self.store.set_document(Collection.USERS, user.uid, user.to_document())

        self.logging_service.log_auth_event(
            "register", user_id=user.uid, email=email, role=user_role.value
        )
        return user

    def login_user(self, email: str, password: str) -> Dict[str, Any]:
        """Authenticate user and return JWT token."""
        from ..security import verify_password

        email = email.strip().lower()
        user = self._find_user_by_email(email)
        if user is None or not user.password_hash:
            self.logging_service.log_auth_event("login", email=email, success=False)
            raise AuthenticationError("Invalid email or password")

        if not verify_password(password, user.password_hash):
            self.logging_service.log_auth_event(
                "login", user_id=user.uid, email=email, success=False
            )
            raise AuthenticationError("Invalid email or password")

        now = utc_now()
        self.store.set_document(
            Collection.USERS,
            user.uid,
            {"lastLogin": format_timestamp(now)},
            merge=True,
        )
        user.last_login = now

        token = self._generate_jwt_token(user)
        self.logging_service.log_auth_event("login", user_id=user.uid, email=email)

        return {
            "user": user,
            "token": token,
            "expires_at": now + timedelta(minutes=self.token_expiry_minutes),
        }

    def validate_token(self, token: str) -> Optional[UserProfile]:
        """Validate JWT token and return user"""
        try:
            # Tokens without an exp claim are rejected
            payload = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

        user_id = payload.get("user_id")
        if not user_id:
            return None
        return self.get_user(user_id)

    def get_user(self, uid: str) -> Optional[UserProfile]:
        data = self.store.get_document(Collection.USERS, uid)
        if data is None:
            return None
        return UserProfile.from_document(data)

    def list_users_by_role(self, role: Union[UserRole, str]) -> List[UserProfile]:
        rows = self.store.query_documents(
            Collection.USERS, filters=[("role", "==", normalize_role(role))]
        )
        return [UserProfile.from_document(data) for _, data in rows]

    def validate_password(self, password: str) -> bool:
        """Validate password strength"""
        # Check minimum length
        if len(password) < self.password_min_length:
            return False

        # Check for uppercase letters
        if not any(c.isupper() for c in password):
            return False

        # Check for lowercase letters
        if not any(c.islower() for c in password):
            return False

        # Check for numbers
        if not any(c.isdigit() for c in password):
            return False

        # Check for special characters
        if not any(c in PASSWORD_SPECIAL_CHARACTERS for c in password):
            return False

        return True

    def _find_user_by_email(self, email: str) -> Optional[UserProfile]:
        rows = self.store.query_documents(
            Collection.USERS, filters=[("email", "==", email)], limit=1
        )
        if not rows:
            return None
        return UserProfile.from_document(rows[0][1])

    def _generate_jwt_token(self, user: UserProfile) -> str:
        """Generate JWT token for user"""
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user.uid,
            "email": user.email,
            "role": user.role.value,
            "exp": now + timedelta(minutes=self.token_expiry_minutes),
            "iat": now,
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)


# Global auth service instance
_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get the global auth service instance"""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
