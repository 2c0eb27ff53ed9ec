from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional
import logging

from acl_filter.permissions.principal import Principal

logger = logging.getLogger(__name__)

_current_principal: ContextVar[Optional[Principal]] = ContextVar("acl_current_principal", default=None)


class TokenStorage:
    """Holds the principal of the current request"""

    def get_principal(self) -> Optional[Principal]:
        return _current_principal.get()

    def set_principal(self, principal: Optional[Principal]) -> Token:
        return _current_principal.set(principal)

    def reset(self, token: Token):
        _current_principal.reset(token)

    @contextmanager
    def authenticated(self, principal: Optional[Principal]) -> Iterator[Optional[Principal]]:
        """Make ``principal`` current for the duration of the block"""
        token = self.set_principal(principal)
        try:
            yield principal
        finally:
            self.reset(token)


token_storage = TokenStorage()


def get_current_principal() -> Optional[Principal]:
    return token_storage.get_principal()
