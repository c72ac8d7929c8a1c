"""
Identity directory implementations.

Provides both in-memory (for testing) and Supabase Auth-backed (for
production) implementations of the identity directory. With Supabase,
claims live in the user's ``app_metadata``, which GoTrue embeds in every
access token it issues.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from supabase import AuthApiError, Client

from .exceptions import (
    EmailAlreadyExistsError,
    IdentityDirectoryError,
    PrincipalNotFoundError,
)
from .models import CLAIM_KEYS, ClaimSet, Principal

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class InMemoryIdentityDirectory:
    """
    Identity directory with in-memory storage.

    For testing and development. Use SupabaseIdentityDirectory for production.
    """

    def __init__(self) -> None:
        self._principals: dict[str, Principal] = {}
        self._lock = threading.Lock()

    def _find_by_email(self, email: str) -> Optional[Principal]:
        wanted = email.strip().lower()
        for principal in self._principals.values():
            if principal.email.lower() == wanted:
                return principal
        return None

    def create_principal(
        self,
        email: str,
        password: str,
        display_name: str,
        email_verified: bool = False,
    ) -> Principal:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise IdentityDirectoryError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )
        with self._lock:
            if self._find_by_email(email) is not None:
                raise EmailAlreadyExistsError(email)
            principal = Principal(
                id=uuid.uuid4().hex,
                email=email.strip().lower(),
                display_name=display_name,
                email_verified=email_verified,
                created_at=datetime.now(timezone.utc),
            )
            self._principals[principal.id] = principal
            return principal.model_copy(deep=True)

    def get_principal(self, uid: str) -> Principal:
        principal = self._principals.get(uid)
        if principal is None:
            raise PrincipalNotFoundError(uid)
        return principal.model_copy(deep=True)

    def get_principal_by_email(self, email: str) -> Principal:
        principal = self._find_by_email(email)
        if principal is None:
            raise PrincipalNotFoundError(email)
        return principal.model_copy(deep=True)

    def update_principal(
        self,
        uid: str,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> Principal:
        with self._lock:
            principal = self._principals.get(uid)
            if principal is None:
                raise PrincipalNotFoundError(uid)
            changes: dict[str, Any] = {}
            if email is not None:
                existing = self._find_by_email(email)
                if existing is not None and existing.id != uid:
                    raise EmailAlreadyExistsError(email)
                changes["email"] = email.strip().lower()
            if display_name is not None:
                changes["display_name"] = display_name
            updated = principal.model_copy(update=changes)
            self._principals[uid] = updated
            return updated.model_copy(deep=True)

    def set_claims(self, uid: str, claims: ClaimSet) -> None:
        with self._lock:
            principal = self._principals.get(uid)
            if principal is None:
                raise PrincipalNotFoundError(uid)
            self._principals[uid] = principal.model_copy(
                update={"claims": claims.model_copy(deep=True)}
            )

    def force_claims_refresh(self, uid: str) -> ClaimSet:
        return self.get_principal(uid).claims

    def list_principals(self) -> list[Principal]:
        return [p.model_copy(deep=True) for p in self._principals.values()]

    def delete_principal(self, uid: str) -> None:
        with self._lock:
            if self._principals.pop(uid, None) is None:
                raise PrincipalNotFoundError(uid)


def _is_email_conflict(error: AuthApiError) -> bool:
    code = getattr(error, "code", None)
    if code in ("email_exists", "user_already_exists"):
        return True
    return "already been registered" in str(error.message)


def _is_not_found(error: AuthApiError) -> bool:
    return getattr(error, "code", None) == "user_not_found" or error.status == 404


class SupabaseIdentityDirectory:
    """
    Identity directory backed by the Supabase Auth admin API.

    Requires a service-role client. Supabase has no admin lookup by
    email, so that lookup pages through the user list.
    """

    page_size = 200

    def __init__(self, supabase_client: Client):
        self._auth = supabase_client.auth.admin

    def _to_principal(self, user: Any) -> Principal:
        user_metadata = user.user_metadata or {}
        return Principal(
            id=user.id,
            email=user.email or "",
            display_name=user_metadata.get("display_name"),
            email_verified=user.email_confirmed_at is not None,
            claims=ClaimSet.from_claims(user.app_metadata),
            created_at=user.created_at,
        )

    def create_principal(
        self,
        email: str,
        password: str,
        display_name: str,
        email_verified: bool = False,
    ) -> Principal:
        try:
            response = self._auth.create_user({
                "email": email,
                "password": password,
                "email_confirm": email_verified,
                "user_metadata": {"display_name": display_name},
            })
        except AuthApiError as e:
            if _is_email_conflict(e):
                raise EmailAlreadyExistsError(email) from e
            raise IdentityDirectoryError(e.message) from e
        logger.info("Created principal %s", response.user.id)
        return self._to_principal(response.user)

    def get_principal(self, uid: str) -> Principal:
        try:
            response = self._auth.get_user_by_id(uid)
        except AuthApiError as e:
            if _is_not_found(e):
                raise PrincipalNotFoundError(uid) from e
            raise IdentityDirectoryError(e.message) from e
        return self._to_principal(response.user)

    def get_principal_by_email(self, email: str) -> Principal:
        wanted = email.strip().lower()
        for principal in self.list_principals():
            if principal.email.lower() == wanted:
                return principal
        raise PrincipalNotFoundError(email)

    def update_principal(
        self,
        uid: str,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> Principal:
        attributes: dict[str, Any] = {}
        if email is not None:
            attributes["email"] = email
        if display_name is not None:
            attributes["user_metadata"] = {"display_name": display_name}
        try:
            response = self._auth.update_user_by_id(uid, attributes)
        except AuthApiError as e:
            if _is_email_conflict(e):
                raise EmailAlreadyExistsError(email or "") from e
            if _is_not_found(e):
                raise PrincipalNotFoundError(uid) from e
            raise IdentityDirectoryError(e.message) from e
        return self._to_principal(response.user)

    def set_claims(self, uid: str, claims: ClaimSet) -> None:
        # GoTrue merges app_metadata, so claims being dropped are nulled explicitly
        payload: dict[str, Any] = {key: None for key in CLAIM_KEYS}
        payload.update(claims.to_claims())
        try:
            self._auth.update_user_by_id(uid, {"app_metadata": payload})
        except AuthApiError as e:
            if _is_not_found(e):
                raise PrincipalNotFoundError(uid) from e
            raise IdentityDirectoryError(e.message) from e

    def force_claims_refresh(self, uid: str) -> ClaimSet:
        return self.get_principal(uid).claims

    def list_principals(self) -> list[Principal]:
        principals: list[Principal] = []
        page = 1
        while True:
            try:
                users = self._auth.list_users(page=page, per_page=self.page_size)
            except AuthApiError as e:
                raise IdentityDirectoryError(e.message) from e
            principals.extend(self._to_principal(u) for u in users)
            if len(users) < self.page_size:
                return principals
            page += 1

    def delete_principal(self, uid: str) -> None:
        try:
            self._auth.delete_user(uid)
        except AuthApiError as e:
            if _is_not_found(e):
                raise PrincipalNotFoundError(uid) from e
            raise IdentityDirectoryError(e.message) from e
