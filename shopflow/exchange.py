import logging
from dataclasses import dataclass, field

import requests
import zope.interface

from .errors import ExchangeFailed, describe_upstream_error
from .interfaces import ITokenExchangeClient
from .scopes import missing_scopes, parse_scopes


logger = logging.getLogger(__name__)


@dataclass
class AccessTokenCredential:
    """
    The authority to call the admin api on behalf of `shop`.

    Not persisted here, whoever receives this decides how long it lives.
    """

    shop: str
    access_token: str = field(repr=False)
    # The granted scopes.
    access_scopes: tuple = ()


@zope.interface.implementer(ITokenExchangeClient)
@dataclass
class TokenExchangeClient:
    """Trade the short lived grant code for a permanent access token."""

    config: object
    session: object = field(default_factory=requests.Session)
    access_token_url_fmt: str = "https://{shop}/admin/oauth/access_token"

    def exchange(self, shop, code):
        url = self.access_token_url_fmt.format(shop=shop)
        payload = {
            "client_id": self.config.api_key,
            "client_secret": self.config.api_secret,
            "code": code,
        }
        try:
            response = self.session.post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self.config.request_timeout_seconds,
            )
        except requests.Timeout:
            logger.warning(f"Token exchange with {shop} timed out.")
            raise ExchangeFailed(
                "Timed out waiting for access token", requests.codes.gateway_timeout
            )
        except requests.RequestException as e:
            logger.warning(f"Token exchange with {shop} failed: {e!r}")
            raise ExchangeFailed(f"Could not reach {shop}", requests.codes.bad_gateway)

        if response.status_code != requests.codes.ok:
            description = describe_upstream_error(response)
            logger.warning(
                f"Token exchange with {shop} returned {response.status_code}: {description}"
            )
            raise ExchangeFailed(description, response.status_code)

        try:
            json_payload = response.json()
            access_token = json_payload["access_token"]
        except (ValueError, KeyError, TypeError):
            raise ExchangeFailed(
                "Malformed access token response", requests.codes.bad_gateway
            )
        if not access_token:
            raise ExchangeFailed(
                "Malformed access token response", requests.codes.bad_gateway
            )

        access_scopes = parse_scopes(json_payload.get("scope", ""))
        missing = missing_scopes(self.config.access_scopes, access_scopes)
        if missing:
            logger.warning(f"{shop} did not grant scopes: {','.join(missing)}")
        logger.info(f"Obtained access token for {shop}")
        return AccessTokenCredential(
            shop=shop, access_token=access_token, access_scopes=access_scopes
        )
