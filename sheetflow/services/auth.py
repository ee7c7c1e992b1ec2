import logging

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.service_account import Credentials

from sheetflow.config import SCOPES
from sheetflow.errors import AuthError, ConfigurationError

logger = logging.getLogger(__name__)


class TokenProvider:
    """
    Exchanges the service account key for a bearer token (JWT-bearer grant).

    google-auth signs the assertion (iss = service account, aud = token
    endpoint, exp = iat + 3600s) and posts it to the token endpoint. The token
    is reused until the credentials report it as expired, then refreshed.
    """

    def __init__(self, settings, scopes=None, request=None):
        self.settings = settings
        try:
            self.credentials = Credentials.from_service_account_info(
                settings.service_account_info(), scopes=scopes or SCOPES)
        except (ValueError, KeyError) as e:
            raise ConfigurationError(
                f"Failed to load the service account key, check the private key format: {e}") from e
        self._request = request or Request()

    def get_token(self):
        if self.credentials.valid:
            return self.credentials.token
        logger.debug("Requesting access token for %s", self.settings.client_email)
        try:
            self.credentials.refresh(self._request)
        except GoogleAuthError as e:
            raise AuthError(f"Failed to retrieve access token from Google: {e}") from e
        if not self.credentials.token:
            raise AuthError("Failed to retrieve access token from Google.")
        return self.credentials.token
