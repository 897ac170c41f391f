import logging
import json
from dataclasses import dataclass, field

import requests
import zope.interface

from .errors import UpstreamError, describe_upstream_error
from .interfaces import IResourceProxy


logger = logging.getLogger(__name__)


@dataclass
class ProxiedResource:
    status_code: int
    # Raw upstream body, forwarded as is.
    body: str
    content_type: str = "application/json"

    def json(self):
        return json.loads(self.body)


@zope.interface.implementer(IResourceProxy)
@dataclass
class ResourceProxy:
    """
    Authenticated GET against the admin api.

    path:
        Relative to `/admin/`, ie. "shop.json" or "api/2024-01/orders.json".
    """

    config: object
    session: object = field(default_factory=requests.Session)
    resource_url_fmt: str = "https://{shop}/admin/{path}"

    def get_resource_url(self, shop, path):
        return self.resource_url_fmt.format(shop=shop, path=path.lstrip("/"))

    def fetch_resource(self, shop, access_token, path):
        url = self.get_resource_url(shop, path)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": access_token,
        }
        try:
            response = self.session.get(
                url, headers=headers, timeout=self.config.request_timeout_seconds
            )
        except requests.Timeout:
            logger.warning(f"GET {url} timed out.")
            raise UpstreamError(
                "Timed out waiting for resource", requests.codes.gateway_timeout
            )
        except requests.RequestException as e:
            logger.warning(f"GET {url} failed: {e!r}")
            raise UpstreamError(f"Could not reach {shop}", requests.codes.bad_gateway)

        if not response.ok:
            description = describe_upstream_error(response)
            logger.warning(f"GET {url} returned {response.status_code}: {description}")
            raise UpstreamError(description, response.status_code)

        try:
            response.json()
        except ValueError:
            raise UpstreamError(
                "Malformed resource response", requests.codes.bad_gateway
            )
        return ProxiedResource(status_code=response.status_code, body=response.text)
