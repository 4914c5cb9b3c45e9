"""Identity management: signup, credentials sign-in and OAuth reconciliation.

The functions here only produce or reject an identity. Session tokens are
issued by the caller (see ``auth.issue_session_token``).
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

import config
from auth import hash_password, verify_password
from database import get_db
from errors import (
    AccountConflict,
    AuthBackendError,
    Conflict,
    InvalidCredentials,
    LinkingFailed,
    ValidationError,
)
from schemas.auth import UserResponse

logger = logging.getLogger(__name__)

CREDENTIALS_PROVIDER = "credentials"
GITHUB_PROVIDER = "github"
SUPPORTED_OAUTH_PROVIDERS = (GITHUB_PROVIDER,)

USER_COLUMNS = "id, email, name, image"


@dataclass
class OAuthIdentity:
    """A verified external identity handed over by an OAuth provider."""

    provider: str
    provider_account_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    type: str = "oauth"
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None
    id_token: Optional[str] = None


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


def _row_to_user(row) -> UserResponse:
    return UserResponse(id=row[0], email=row[1], name=row[2], image=row[3])


def _fetch_user(cursor, user_id: int) -> Optional[UserResponse]:
    cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,))
    row = cursor.fetchone()
    return _row_to_user(row) if row else None


def get_user_by_id(user_id: int) -> Optional[UserResponse]:
    with get_db() as conn:
        return _fetch_user(conn.cursor(), user_id)


def get_user_by_email(email: str, include_password=False):
    """Look up a user by normalized email, returning a dict or None"""
    email = normalize_email(email)
    if email is None:
        return None
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = ?", (email,))
        row = cursor.fetchone()
    if not row:
        return None
    user = {"id": row[0], "email": row[1], "name": row[2], "image": row[3]}
    if include_password:
        user["password_hash"] = row[4]
    return user


def get_user_accounts(user_id: int):
    """List the (provider, provider_account_id) pairs linked to a user"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT provider, provider_account_id FROM accounts WHERE user_id = ? ORDER BY id ASC",
            (user_id,),
        )
        return [{"provider": r[0], "provider_account_id": r[1]} for r in cursor.fetchall()]


def register_user(name: str, email: str, password: str) -> UserResponse:
    """Create a credentials user with a bcrypt password hash."""
    name = (name or "").strip()
    email = normalize_email(email)
    if not name:
        raise ValidationError("Name is required")
    if not email or "@" not in email:
        raise ValidationError("A valid email is required")
    if not password or len(password) < config.MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters")

    hashed = hash_password(password)
    with get_db() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO users (email, name, password_hash) VALUES (?, ?, ?)",
                (email, name, hashed),
            )
            user_id = cursor.lastrowid
            cursor.execute(
                "INSERT INTO accounts (user_id, type, provider, provider_account_id) VALUES (?, ?, ?, ?)",
                (user_id, CREDENTIALS_PROVIDER, CREDENTIALS_PROVIDER, str(user_id)),
            )
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            raise Conflict("Email already registered")
        user = _fetch_user(cursor, user_id)
    logger.info("Registered credentials user %s", user_id)
    return user


def authenticate_credentials(email: str, password: str) -> UserResponse:
    """Validate an email/password pair and return the matching identity."""
    if not email or not password:
        raise InvalidCredentials()
    try:
        user = get_user_by_email(email, include_password=True)
    except sqlite3.Error as e:
        logger.exception("User lookup failed during credentials sign-in")
        raise AuthBackendError() from e
    if not user or not user["password_hash"]:
        raise InvalidCredentials()
    if not verify_password(password, user["password_hash"]):
        raise InvalidCredentials()
    return UserResponse(id=user["id"], email=user["email"], name=user["name"], image=user["image"])


def _insert_account(cursor, user_id: int, identity: OAuthIdentity):
    cursor.execute(
        """
        INSERT INTO accounts (user_id, type, provider, provider_account_id, access_token,
                              refresh_token, expires_at, token_type, scope, id_token)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            user_id, identity.type, identity.provider, identity.provider_account_id,
            identity.access_token, identity.refresh_token, identity.expires_at,
            identity.token_type, identity.scope, identity.id_token,
        ),
    )


def _create_oauth_user(identity: OAuthIdentity, email: Optional[str]) -> Optional[UserResponse]:
    """Create a user together with its provider account.

    Returns None when a concurrent sign-in stored the same email or provider
    account first.
    """
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    "INSERT INTO users (email, name, image) VALUES (?, ?, ?)",
                    (email, identity.name, identity.image),
                )
                user_id = cursor.lastrowid
                _insert_account(cursor, user_id, identity)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise
            user = _fetch_user(cursor, user_id)
    except sqlite3.IntegrityError:
        logger.info("%s account %s was stored by a concurrent sign-in", identity.provider, identity.provider_account_id)
        return None
    except sqlite3.Error as e:
        logger.exception("Failed to create user for %s account %s", identity.provider, identity.provider_account_id)
        raise AuthBackendError() from e
    logger.info("Created user %s from %s account %s", user_id, identity.provider, identity.provider_account_id)
    return user


def _link_account(user_id: int, identity: OAuthIdentity):
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            try:
                _insert_account(cursor, user_id, identity)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise
    except sqlite3.Error as e:
        logger.exception("Failed to link %s account to user %s", identity.provider, user_id)
        raise LinkingFailed() from e
    logger.info("Linked %s account %s to user %s", identity.provider, identity.provider_account_id, user_id)


def _lookup_identity(identity: OAuthIdentity, email: Optional[str]):
    """Read what the store already knows about an incoming identity.

    Returns ``(linked_user_id, linked_user, existing, provider_accounts)``.
    """
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT user_id FROM accounts WHERE provider = ? AND provider_account_id = ?",
                (identity.provider, identity.provider_account_id),
            )
            row = cursor.fetchone()
            linked_user_id = row[0] if row else None

            existing = None
            provider_accounts = []
            if email:
                cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = ?", (email,))
                row = cursor.fetchone()
                if row:
                    existing = _row_to_user(row)
                    cursor.execute(
                        "SELECT provider_account_id FROM accounts WHERE user_id = ? AND provider = ?",
                        (existing.id, identity.provider),
                    )
                    provider_accounts = [r[0] for r in cursor.fetchall()]
            linked_user = _fetch_user(cursor, linked_user_id) if linked_user_id is not None else None
    except sqlite3.Error as e:
        logger.exception("Identity lookup failed during %s sign-in", identity.provider)
        raise AuthBackendError() from e
    return linked_user_id, linked_user, existing, provider_accounts


def sign_in_oauth(identity: OAuthIdentity) -> UserResponse:
    """Reconcile a verified OAuth identity with the identity store.

    The rules, in order:

    * no user owns the email: create a user and link the account (when the
      provider account is already linked, its owner is signed in instead);
    * the user already has this exact provider account: plain repeat sign-in;
    * the user has a different account under the same provider, or the
      provider account belongs to someone else: ``AccountConflict``;
    * otherwise link the new account to the existing user, raising
      ``LinkingFailed`` if the store rejects it.

    If a concurrent first sign-in creates the same user while we do, the
    rules are applied once more against what it stored. Store faults while
    looking things up surface as ``AuthBackendError``.
    """
    if identity.provider not in SUPPORTED_OAUTH_PROVIDERS:
        raise ValidationError(f"Unsupported provider: {identity.provider}")
    if not identity.provider_account_id:
        raise ValidationError("Provider account id is required")
    email = normalize_email(identity.email)

    for _ in range(2):
        linked_user_id, linked_user, existing, provider_accounts = _lookup_identity(identity, email)
        if existing is not None:
            break
        if linked_user is not None:
            return linked_user
        user = _create_oauth_user(identity, email)
        if user is not None:
            return user
    else:
        raise AuthBackendError()

    if identity.provider_account_id in provider_accounts:
        return existing

    if provider_accounts or linked_user_id is not None:
        logger.warning(
            "Refusing to link %s account %s to user %s: a different account is already linked",
            identity.provider, identity.provider_account_id, existing.id,
        )
        raise AccountConflict()

    _link_account(existing.id, identity)
    return existing
