import logging
import hmac
import hashlib
from dataclasses import dataclass
from urllib.parse import urlencode

import zope.interface

from .interfaces import ISigner


logger = logging.getLogger(__name__)


# Never part of the signed message.
EXCLUDED_KEYS = ("hmac", "signature")


@zope.interface.implementer(ISigner)
@dataclass
class Signer:
    """
    Compute and verify the hex HMAC-SHA256 the platform attaches to callbacks.
    """

    digestmod: object = hashlib.sha256

    def sign(self, params, secret):
        if isinstance(secret, str):
            secret = secret.encode("utf8")
        message = self.encode_params_for_hmac(params)
        return hmac.new(secret, message.encode("utf8"), self.digestmod).hexdigest()

    def verify(self, params, provided_hmac, secret):
        """Return True only if `provided_hmac` signs `params`, never raises."""
        if not provided_hmac:
            return False
        try:
            our_hmac = self.sign(params, secret).encode("utf8")
            if isinstance(provided_hmac, str):
                provided_hmac = provided_hmac.encode("utf8")
            return hmac.compare_digest(our_hmac, provided_hmac)
        except (TypeError, ValueError, AttributeError) as e:
            logger.debug(f"HMAC comparison failed: {e!r}")
            return False

    def encode_params_for_hmac(self, params):
        """
        Encode params with special shopify rules.

        RULE #1: keys are sorted, hmac and signature are dropped.
        RULE #2: ("k[]", ["1", "2"]) is converted to ("k", '["1", "2"]')
        RULE #3: safe chars are ":/" for whatever reason.
        """
        params_to_encode = []
        for k, values in sorted(self.group_params(params).items()):
            if k in EXCLUDED_KEYS:
                continue
            elif k.endswith("[]"):
                k = k[:-2]
                v = "[{}]".format(", ".join(f'"{v_item}"' for v_item in values))
            else:
                # Repeated plain keys keep the last value, like a query dict.
                v = values[-1]
            params_to_encode.append((k, v))
        return urlencode(params_to_encode, safe=":/")

    def group_params(self, params):
        """Collect values per key from a dict or a webob multidict."""
        if hasattr(params, "dict_of_lists"):
            return params.dict_of_lists()
        grouped = {}
        for k, v in params.items():
            if isinstance(v, (list, tuple)):
                grouped.setdefault(k, []).extend(v)
            else:
                grouped.setdefault(k, []).append(v)
        return grouped
