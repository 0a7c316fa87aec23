"""
Access Gate.
Resolves a bearer token to the calling profile and enforces the role each
dashboard pipeline requires. No side effects.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import AuthenticationError, AccessDeniedError, ProfileNotFoundError, FetchFailedError
from app.models.profile import Profile, ProfileRole
from app.schemas.records import ProfileCard
from app.services import auth as auth_service
from app.services.base import BaseService


class Caller(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int
    role: ProfileRole
    profile: ProfileCard


class AccessGate(BaseService):

    def _subject(self, token: Optional[str]) -> str:
        if not token:
            raise AuthenticationError()

        payload = auth_service.decode_access_token(token)
        if payload is None:
            self.log_warning("Authentication failed: Invalid token")
            raise AuthenticationError()
        if payload.get("error") == "TOKEN_EXPIRED":
            self.log_info("Authentication failed: Token expired")
            raise AuthenticationError()
        if payload.get("type") != "access":
            self.log_warning("Authentication failed: Invalid token type")
            raise AuthenticationError()

        subject = payload.get("sub")
        if subject is None:
            self.log_warning("Authentication failed: Missing subject (email) in token")
            raise AuthenticationError()
        return subject

    def _load_profile(self, email: str) -> Optional[Profile]:
        try:
            with self.session_factory() as db:
                profile = db.query(Profile).filter(Profile.email == email).first()
                if profile is not None:
                    db.expunge(profile)
                return profile
        except SQLAlchemyError as e:
            self.log_error(f"Profile lookup failed: {e}", exc_info=True)
            raise FetchFailedError() from e

    @staticmethod
    def _caller(profile: Profile) -> Caller:
        return Caller(user_id=profile.id, role=profile.role, profile=ProfileCard.model_validate(profile))

    def require_team_view(self, token: Optional[str]) -> Caller:
        """Admin pipeline gate: caller must be an admin or stakeholder."""
        email = self._subject(token)
        profile = self._load_profile(email)
        if profile is None or not profile.is_active or not profile.can_view_team:
            self.log_warning(f"Access denied to team dashboard for {email}")
            raise AccessDeniedError()
        return self._caller(profile)

    def require_profile(self, token: Optional[str]) -> Caller:
        """Employee pipeline gate: any resolvable profile."""
        email = self._subject(token)
        profile = self._load_profile(email)
        if profile is None:
            self.log_warning(f"No profile found for {email}")
            raise ProfileNotFoundError()
        if not profile.is_active:
            raise AccessDeniedError("Profile is inactive")
        return self._caller(profile)
