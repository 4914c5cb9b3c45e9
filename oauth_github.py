"""
OAuth handler for GitHub authentication.
"""

import hmac
import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

import config as cfg
from auth import create_access_token, decode_access_token
from errors import BackendError, ProviderError, ValidationError
from services.accounts import GITHUB_PROVIDER, OAuthIdentity

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10


class GitHubOAuthHandler:
    """Handles the GitHub OAuth authorization code flow"""

    def _require_configured(self):
        if not cfg.GITHUB_CLIENT_ID or not cfg.GITHUB_CLIENT_SECRET:
            raise BackendError("OAuth not configured. Please contact administrator.")

    def generate_auth_url(self) -> Dict[str, str]:
        """Generate the GitHub authorization URL with a signed CSRF state"""
        self._require_configured()
        # Short-lived signed token; the route also pins it to the browser in a cookie
        state = create_access_token(
            {"purpose": "oauth_state", "provider": GITHUB_PROVIDER, "nonce": secrets.token_urlsafe(16)},
            expires_delta=timedelta(minutes=cfg.OAUTH_STATE_EXPIRE_MINUTES),
        )
        params = {
            'client_id': cfg.GITHUB_CLIENT_ID,
            'redirect_uri': cfg.GITHUB_REDIRECT_URI,
            'scope': ' '.join(cfg.GITHUB_SCOPES),
            'state': state,
            'allow_signup': 'true',
        }
        return {
            'auth_url': f"{cfg.GITHUB_AUTHORIZE_URL}?{urlencode(params)}",
            'state': state,
        }

    def validate_state(self, state: str, expected_state: Optional[str]) -> bool:
        """Accept only an unexpired state of ours that matches the caller's cookie"""
        if not state or not expected_state or not hmac.compare_digest(state.encode(), expected_state.encode()):
            return False
        payload = decode_access_token(state)
        return bool(payload) and payload.get("purpose") == "oauth_state" and payload.get("provider") == GITHUB_PROVIDER

    def handle_oauth_callback(self, code: str, state: str, expected_state: Optional[str]) -> OAuthIdentity:
        """Exchange the callback code and build a verified identity"""
        if not self.validate_state(state, expected_state):
            raise ValidationError("Invalid state parameter")
        self._require_configured()
        try:
            token_data = self._exchange_code_for_token(code)
            access_token = token_data.get('access_token')
            if not access_token:
                raise ProviderError(token_data.get('error_description') or "GitHub did not return an access token")
            user_info = self._get_user_info(access_token)
            email = user_info.get('email') or self._get_primary_email(access_token)
        except requests.RequestException as e:
            logger.error(f"GitHub OAuth exchange failed: {e}")
            raise ProviderError() from e

        if user_info.get('id') is None:
            raise ProviderError("GitHub returned incomplete user info")

        return OAuthIdentity(
            provider=GITHUB_PROVIDER,
            provider_account_id=str(user_info['id']),
            email=email,
            name=user_info.get('name') or user_info.get('login'),
            image=user_info.get('avatar_url'),
            access_token=access_token,
            token_type=token_data.get('token_type'),
            scope=token_data.get('scope'),
        )

    def _exchange_code_for_token(self, code: str) -> Dict[str, Any]:
        data = {
            'client_id': cfg.GITHUB_CLIENT_ID,
            'client_secret': cfg.GITHUB_CLIENT_SECRET,
            'code': code,
            'redirect_uri': cfg.GITHUB_REDIRECT_URI,
        }
        headers = {'Accept': 'application/json'}
        response = requests.post(cfg.GITHUB_TOKEN_URL, data=data, headers=headers, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def _api_get(self, path: str, access_token: str):
        headers = {
            'Authorization': f'Bearer {access_token}',
            'Accept': 'application/vnd.github+json',
        }
        response = requests.get(f"{cfg.GITHUB_API_URL}{path}", headers=headers, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def _get_user_info(self, access_token: str) -> Dict[str, Any]:
        return self._api_get('/user', access_token)

    def _get_primary_email(self, access_token: str) -> Optional[str]:
        """The profile email is empty when the user keeps it private"""
        emails = self._api_get('/user/emails', access_token)
        for entry in emails:
            if entry.get('primary') and entry.get('verified'):
                return entry.get('email')
        return None


# Global OAuth handler instance
github_oauth = GitHubOAuthHandler()
