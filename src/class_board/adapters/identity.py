"""
Identity provider abstractions.

The provider issues the transport identity used for store access. It is
unrelated to the application identity, which the board resolves itself by
matching credentials against its user directory.

Concrete implementations: 'InMemoryIdentityProvider'.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import BaseModel


class TransportIdentity(BaseModel):
    uid: str
    is_anonymous: bool = True


IdentityCallback = Callable[[TransportIdentity | None], None]


class IdentityProvider(ABC):
    """
    Abstract sign-in backend.

    'on_identity_change' must invoke the callback at least once after
    registration with the current identity (possibly None), and again on
    every change, always from the event loop rather than inline.
    """

    @abstractmethod
    async def sign_in_anonymous(self) -> TransportIdentity:
        pass

    @abstractmethod
    async def sign_in_with_token(self, token: str) -> TransportIdentity:
        pass

    @abstractmethod
    def on_identity_change(self, callback: IdentityCallback) -> Callable[[], None]:
        """Register 'callback' and return a function that detaches it."""
        pass
