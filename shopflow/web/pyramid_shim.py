import logging
from dataclasses import dataclass, field
from typing import Callable

from pyramid.request import Request
from pyramid.httpexceptions import HTTPFound
import zope.interface

from ..cookieserializer import get_default_signed_serializer
from ..interfaces import IWebShim


logger = logging.getLogger(__name__)


@dataclass
class PyramidWebShimConfig:
    # This is used to sign cookies, signing is refused without it.
    cookie_secret: str = None


@zope.interface.implementer(IWebShim)
@dataclass
class PyramidWebShim:
    """Shim between the authorization flow and pyramid for web tasks."""

    # Configuration params that describe how we should behave.
    config: PyramidWebShimConfig
    # The current request.
    request: Request
    # Builds a webob.cookies.SignedSerializer from (secret, salt).
    signed_serializer: Callable = field(default=get_default_signed_serializer)

    def get_serializer(self, secure_salt=None):
        if not self.config.cookie_secret:
            raise AssertionError("Signed cookies need a cookie_secret.")
        return self.signed_serializer(self.config.cookie_secret, secure_salt)

    def set_cookie(
        self,
        name,
        value,
        signed=True,
        httponly=None,
        samesite=None,
        secure=True,
        max_age=None,
        secure_salt=None,
        response=None,
    ):
        """Set a cookie on `response`, the request's own response by default."""
        if response is None:
            response = self.request.response
        if signed:
            value = self.get_serializer(secure_salt).dumps(value).decode("ascii")
        response.set_cookie(
            name,
            value,
            httponly=httponly,
            samesite=samesite,
            secure=secure,
            max_age=max_age,
        )

    def get_cookie(self, name, signed=True, default=None, secure_salt=None):
        """Read a cookie, a signed cookie that fails to verify reads as `default`."""
        if name not in self.request.cookies:
            return default
        value = self.request.cookies[name]
        if not signed:
            return value
        try:
            return self.get_serializer(secure_salt).loads(value)
        except ValueError as e:
            logger.debug(f"Could not read signed cookie {name}: {e}")
            return default

    def redirect_302_url(self, url, with_headers=True):
        """Return a redirect, carrying any cookies we set on this request."""
        kwargs = {}
        if with_headers:
            kwargs["headers"] = [
                (name, value)
                for name, value in self.request.response.headerlist
                if name.lower() == "set-cookie"
            ]
        return HTTPFound(url, **kwargs)

    def get_param(self, name, default=None):
        return self.request.GET.get(name, default)

    def get_params(self):
        """All query params, repeated keys included."""
        return self.request.GET.copy()

    def response_200_string(self, content, content_type="text/html"):
        response = self.request.response
        response.content_type = content_type
        response.charset = "utf-8"
        response.text = content
        return response

    def response_resource(self, resource):
        """Pass a proxied resource through with its upstream status."""
        response = self.response_200_string(resource.body, resource.content_type)
        response.status_code = resource.status_code
        return response
