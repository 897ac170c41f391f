import logging
import os
from wsgiref.simple_server import make_server

import dotenv
import requests
from pyramid.config import Configurator

from .. import ShopFlowConfig
from ..errors import ShopFlowError
from . import views


logger = logging.getLogger(__name__)


def make_app(shopflow_config, session_factory=requests.Session):
    """Build the wsgi app serving the install handshake and demo routes."""
    with Configurator() as config:
        config.registry.shopflow_config = shopflow_config
        config.registry.shopflow_session_factory = session_factory
        config.add_request_method(views.get_flow, "shopflow", reify=True)

        config.add_route("home", "/")
        config.add_route("install", "/shopify")
        config.add_route("callback", shopflow_config.callback_path)
        config.add_route("check", "/check")
        config.add_route("play", "/play")

        config.add_view(views.home_view, route_name="home", request_method="GET")
        config.add_view(views.install_view, route_name="install", request_method="GET")
        config.add_view(
            views.callback_view, route_name="callback", request_method="GET"
        )
        config.add_view(views.check_view, route_name="check", request_method="GET")
        config.add_view(views.play_view, route_name="play", request_method="GET")
        config.add_exception_view(views.shopflow_error_view, context=ShopFlowError)
        return config.make_wsgi_app()


def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    dotenv.load_dotenv()
    shopflow_config = ShopFlowConfig.from_environ(os.environ)
    app = make_app(shopflow_config)
    server = make_server("0.0.0.0", shopflow_config.port, app)
    logger.info(f"Listening on http://localhost:{shopflow_config.port}")
    server.serve_forever()


if __name__ == "__main__":
    main()
