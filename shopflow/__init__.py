"""
Install handshake for apps on a multi-tenant shop platform.

@NOTE: shop is always the full shop host, ie. "example.myshopify.com", that
is what the platform passes around in every query string.

@NOTE: The state token is never stored on our side.  It is handed to the
platform in the authorize url and to the browser in a cookie on the same
response, the callback has to bring both back and they must match.
"""
import enum
import logging
import re
from dataclasses import dataclass, field
from urllib.parse import urlencode

from .errors import (
    ConfigurationError,
    InvalidRequest,
    MissingParameters,
    OriginMismatch,
    ShopFlowError,
    SignatureInvalid,
)
from .exchange import AccessTokenCredential, TokenExchangeClient
from .interfaces import (
    IWebShim,
    ISigner,
    IStateTokenIssuer,
    ITokenExchangeClient,
    IResourceProxy,
)
from .nonce import StateToken, StateTokenIssuer
from .proxy import ProxiedResource, ResourceProxy
from .scopes import parse_scopes
from .signer import Signer

logger = logging.getLogger(__name__)


__all__ = [
    "AccessTokenCredential",
    "AuthorizationFlow",
    "FlowState",
    "ProxiedResource",
    "ShopFlowConfig",
    "ShopFlowError",
    "StateToken",
]


TEN_MINUTES_IN_SECONDS = 10 * 60


ZERO_SECONDS = 0


MISSING_SHOP_MESSAGE = (
    "Missing shop parameter. Please add "
    "?shop=your-development-shop.myshopify.com to your request"
)


# Bare host name: no scheme, port, path, query, fragment or whitespace.
SHOP_HOST_RE = re.compile(r"[a-z0-9][a-z0-9.-]*[a-z0-9]", re.IGNORECASE)


@dataclass
class ShopFlowConfig:
    """
    Mechanism to provide configuration to AuthorizationFlow and friends.

    Built once at startup, nothing reads the environment after that.
    """

    api_key: str
    api_secret: str = field(repr=False)
    # The access scopes that our app needs, such as read_orders, write_orders, etc.
    access_scopes: tuple
    # Public base url of this app, the platform redirects back under it.
    app_url: str
    port: int = 3000
    callback_path: str = "/shopify/callback"
    # Fixed shop and token for the /check and /play routes.
    demo_shop: str = None
    demo_access_token: str = field(default=None, repr=False)
    state_cookie_name: str = "state"
    state_cookie_max_age: int = TEN_MINUTES_IN_SECONDS
    # When set the state cookie is signed with it.
    cookie_secret: str = field(default=None, repr=False)
    request_timeout_seconds: float = 10

    def __post_init__(self):
        # Outbound calls are always bounded.
        if self.request_timeout_seconds is None or self.request_timeout_seconds <= 0:
            raise ConfigurationError(
                f"Request timeout must be positive, got {self.request_timeout_seconds}"
            )

    @property
    def redirect_uri(self):
        return self.app_url.rstrip("/") + self.callback_path

    @property
    def sign_state_cookie(self):
        return bool(self.cookie_secret)

    @classmethod
    def from_environ(cls, environ):
        missing = [
            name
            for name in (
                "SHOPIFY_API_KEY",
                "SHOPIFY_API_SECRET",
                "SHOPIFY_CALLBACK_URL",
            )
            if not environ.get(name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing environment variables: {', '.join(missing)}"
            )
        try:
            port = int(environ.get("PORT") or 3000)
            timeout = float(environ.get("SHOPFLOW_REQUEST_TIMEOUT") or 10)
        except ValueError as e:
            raise ConfigurationError(f"Bad numeric setting: {e}")
        return cls(
            api_key=environ["SHOPIFY_API_KEY"],
            api_secret=environ["SHOPIFY_API_SECRET"],
            access_scopes=parse_scopes(environ.get("SHOPIFY_SCOPES", "")),
            app_url=environ["SHOPIFY_CALLBACK_URL"],
            port=port,
            demo_shop=environ.get("SHOPIFY_NAME") or None,
            demo_access_token=environ.get("SHOPIFY_TOKEN") or None,
            cookie_secret=environ.get("SHOPFLOW_COOKIE_SECRET") or None,
            request_timeout_seconds=timeout,
        )


class FlowState(enum.Enum):
    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"
    VALIDATED = "validated"
    TOKEN_EXCHANGED = "token_exchanged"
    COMPLETE = "complete"
    REJECTED = "rejected"


# Params the callback cannot do without.
REQUIRED_CALLBACK_PARAMS = ("shop", "hmac", "code")


@dataclass
class AuthorizationFlow:
    """
    Drive one install round trip: redirect out, validate the callback,
    trade the code for a token and use it.

    One instance per request.  A callback is handled by a fresh instance,
    the cookie is what carries the pending install across.
    """

    config: ShopFlowConfig
    # Only needed by the view level methods.
    web_shim: IWebShim = None
    signer: ISigner = field(default_factory=Signer)
    state_issuer: IStateTokenIssuer = field(default_factory=StateTokenIssuer)
    exchange_client: ITokenExchangeClient = None
    resource_proxy: IResourceProxy = None
    state: FlowState = FlowState.IDLE

    def __post_init__(self):
        if self.exchange_client is None:
            self.exchange_client = TokenExchangeClient(self.config)
        if self.resource_proxy is None:
            self.resource_proxy = ResourceProxy(self.config)

    def require_state(self, *allowed):
        if self.state not in allowed:
            raise AssertionError(
                f"Flow is {self.state.value}, expected one of: "
                f"{', '.join(s.value for s in allowed)}"
            )

    def reject(self, error):
        logger.warning(f"Rejecting callback: {error.description}")
        self.state = FlowState.REJECTED
        raise error

    """
    Core steps
    """

    def initiate_install(self, shop):
        """
        Issue a state token and build the authorize url for `shop`.

        Returns a 2-tuple of (state_token, authorize_url), the caller must
        put the token value in the state cookie.
        """
        self.require_state(FlowState.IDLE)
        shop = (shop or "").strip()
        if not shop:
            raise InvalidRequest(MISSING_SHOP_MESSAGE)
        if not self.is_valid_shop_host(shop):
            raise InvalidRequest("Shop is not properly formatted")
        state_token = self.state_issuer.issue()
        url = self.get_authorize_url(shop, state_token.value)
        self.state = FlowState.AWAITING_CALLBACK
        logger.info(f"Redirecting {shop} to authorize install")
        return state_token, url

    def is_valid_shop_host(self, shop):
        return bool(SHOP_HOST_RE.fullmatch(shop))

    def get_authorize_url(self, shop, state_value):
        query = sorted(
            {
                "client_id": self.config.api_key,
                # The scopes our app needs, like write_orders, read_orders, etc.
                "scope": ",".join(self.config.access_scopes),
                # This tells the platform where to send the callback with our grant code.
                "redirect_uri": self.config.redirect_uri,
                "state": state_value,
            }.items()
        )
        return f"https://{shop}/admin/oauth/authorize?{urlencode(query)}"

    def handle_callback(self, params, cookie_state):
        """
        Validate the platform's callback and exchange its code for a token.

        params:
            Every query param of the callback, verbatim.
        cookie_state:
            The state value read back from our cookie, None if it was
            missing or could not be read.

        Checks run in order: state against cookie, required params, hmac.
        """
        self.require_state(FlowState.IDLE, FlowState.AWAITING_CALLBACK)
        self.state = FlowState.AWAITING_CALLBACK

        # A missing cookie is a mismatch, never a reason to skip the check.
        state = params.get("state")
        if not cookie_state or state != cookie_state:
            self.reject(OriginMismatch())

        shop, provided_hmac, code = (
            params.get(name) for name in REQUIRED_CALLBACK_PARAMS
        )
        if not (shop and provided_hmac and code):
            self.reject(MissingParameters())

        if not self.signer.verify(
            params, provided_hmac, self.config.api_secret.encode("utf8")
        ):
            self.reject(SignatureInvalid())
        self.state = FlowState.VALIDATED

        try:
            credential = self.exchange_client.exchange(shop, code)
        except ShopFlowError:
            self.state = FlowState.REJECTED
            raise
        self.state = FlowState.TOKEN_EXCHANGED
        return credential

    def complete(self, credential, path="shop.json"):
        """Use a fresh credential to fetch `path` from the admin api."""
        self.require_state(FlowState.TOKEN_EXCHANGED)
        resource = self.resource_proxy.fetch_resource(
            credential.shop, credential.access_token, path
        )
        self.state = FlowState.COMPLETE
        return resource

    def fetch_demo(self, path):
        """Fetch `path` with the statically configured shop and token."""
        if not (self.config.demo_shop and self.config.demo_access_token):
            raise InvalidRequest("Demo shop and access token are not configured")
        return self.resource_proxy.fetch_resource(
            self.config.demo_shop, self.config.demo_access_token, path
        )

    """
    Web level steps
    """

    def begin_install(self):
        """Redirect to the platform to ask the shop owner to install us."""
        state_token, url = self.initiate_install(self.web_shim.get_param("shop"))
        self.set_state_cookie(state_token.value, max_age=self.config.state_cookie_max_age)
        return self.web_shim.redirect_302_url(url)

    def auth_callback(self):
        """Validate callback, get access token, then answer with the shop."""
        cookie_state = self.web_shim.get_cookie(
            self.config.state_cookie_name, signed=self.config.sign_state_cookie
        )
        credential = self.handle_callback(self.web_shim.get_params(), cookie_state)

        # Clear state cookie because it served its purpose and is now invalid.
        self.expire_state_cookie()

        return self.web_shim.response_resource(self.complete(credential))

    def expire_state_cookie(self, response=None):
        self.set_state_cookie("", max_age=ZERO_SECONDS, response=response)

    def set_state_cookie(self, value, max_age, response=None):
        self.web_shim.set_cookie(
            self.config.state_cookie_name,
            value,
            signed=self.config.sign_state_cookie,
            max_age=max_age,
            httponly=True,
            # The callback is a top level GET navigation from the platform.
            samesite="lax",
            secure=True,
            response=response,
        )
