from dataclasses import dataclass
import random
import string

import zope.interface

from .interfaces import IStateTokenIssuer


@dataclass(frozen=True)
class StateToken:
    """
    One-time value binding an install redirect to its callback.

    It travels twice: as the `state` query param and in a cookie on the
    same response.
    """

    value: str


@zope.interface.implementer(IStateTokenIssuer)
@dataclass
class StateTokenIssuer:
    charset: str = string.ascii_lowercase + string.digits
    # 32 chars of 36 symbols is a little over 165 bits.
    length: int = 32

    def issue(self):
        return StateToken(self.get_nonce())

    def get_nonce(self):
        """Get a random string of `length` characters from `charset`."""
        rng = random.SystemRandom()
        return "".join(rng.choice(self.charset) for _ in range(self.length))
