"""
Failures that end the current request.

Each error knows the HTTP status it should be reported with and a human
readable description, the web layer turns these into plain responses.
"""
from requests import codes


class ShopFlowError(Exception):
    status_code = codes.internal_server_error
    description = "Internal error"

    def __init__(self, description=None, status_code=None):
        if description is not None:
            self.description = description
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.description)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.status_code}, {self.description!r})"


class ConfigurationError(ShopFlowError):
    description = "Configuration is incomplete"


class InvalidRequest(ShopFlowError):
    status_code = codes.bad_request
    description = "Invalid request"


class MissingParameters(InvalidRequest):
    description = "Required parameters missing"


class OriginMismatch(ShopFlowError):
    status_code = codes.forbidden
    description = "Request origin cannot be verified"


class SignatureInvalid(ShopFlowError):
    status_code = codes.bad_request
    description = "HMAC validation failed"


class UpstreamError(ShopFlowError):
    """The platform answered with a failure, or did not answer at all."""

    status_code = codes.bad_gateway
    description = "Upstream request failed"


class ExchangeFailed(UpstreamError):
    description = "Access token exchange failed"


def describe_upstream_error(response):
    """Pull the most useful message out of a failed platform response.

    The platform is inconsistent: oauth endpoints use `error_description`,
    the admin api uses `errors` (a string or a dict of lists).
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error_description", "errors", "error"):
            value = body.get(key)
            if not value:
                continue
            if isinstance(value, dict):
                return "; ".join(
                    f"{k}: {', '.join(v) if isinstance(v, list) else v}"
                    for k, v in value.items()
                )
            if isinstance(value, list):
                return ", ".join(str(v) for v in value)
            return str(value)
    text = (response.text or "").strip()
    return text or response.reason or f"HTTP {response.status_code}"
