"""
Admin token verification
"""

import hmac
from typing import Any, Optional

from .constants import ERROR_MESSAGES
from .errors import AuthorizationError


class AdminAuthorizer:
    """Stateless check of a presented token against the server-held secret"""

    def __init__(self, secret: Optional[str]):
        self._secret = secret or ""

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def verify(self, token: Any) -> bool:
        """True iff a secret is configured and token equals it exactly"""
        if not self._secret or not isinstance(token, str):
            return False
        return hmac.compare_digest(token.encode("utf-8"), self._secret.encode("utf-8"))

    def require(self, token: Any) -> None:
        """
        Raise unless the token is valid

        An unset secret and a wrong token produce the same error so callers
        cannot tell whether the admin feature is configured.
        """
        if not self.verify(token):
            raise AuthorizationError(ERROR_MESSAGES["unauthorized"])
