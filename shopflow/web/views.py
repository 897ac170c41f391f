import logging

from pyramid.response import Response

from .. import AuthorizationFlow
from ..exchange import TokenExchangeClient
from ..proxy import ResourceProxy
from .pyramid_shim import PyramidWebShim, PyramidWebShimConfig


logger = logging.getLogger(__name__)


def get_flow(request):
    """Build the per request flow, exposed as `request.shopflow`."""
    registry = request.registry
    config = registry.shopflow_config
    # One session per request, both outbound calls share its pool.
    session = registry.shopflow_session_factory()
    request.add_finished_callback(lambda request: session.close())
    return AuthorizationFlow(
        config=config,
        web_shim=PyramidWebShim(
            PyramidWebShimConfig(cookie_secret=config.cookie_secret), request
        ),
        exchange_client=TokenExchangeClient(config, session=session),
        resource_proxy=ResourceProxy(config, session=session),
    )


def home_view(request):
    return Response("Hello World!", content_type="text/plain", charset="utf-8")


def install_view(request):
    return request.shopflow.begin_install()


def callback_view(request):
    return request.shopflow.auth_callback()


def check_view(request):
    flow = request.shopflow
    return flow.web_shim.response_resource(flow.fetch_demo("shop.json"))


def play_view(request):
    flow = request.shopflow
    return flow.web_shim.response_resource(flow.fetch_demo("customers.json"))


def shopflow_error_view(exc, request):
    """Every flow failure ends as plain text with its own status."""
    if exc.status_code >= 500:
        logger.error(f"{request.path} failed: {exc!r}")
    response = Response(
        exc.description,
        status=exc.status_code,
        content_type="text/plain",
        charset="utf-8",
    )
    # A callback spends its state token whether it passes or not.
    route = getattr(request, "matched_route", None)
    if route is not None and route.name == "callback":
        request.shopflow.expire_state_cookie(response)
    return response
