import json
from unittest import mock

import pytest
import requests

from shopflow import ShopFlowConfig
from shopflow.signer import Signer


API_SECRET = "hush"


SHOP = "test.myshop.com"


@pytest.fixture
def config():
    return ShopFlowConfig(
        api_key="key123",
        api_secret=API_SECRET,
        access_scopes=("read_orders", "write_products"),
        app_url="https://app.example.com/",
        demo_shop="demo.myshopify.com",
        demo_access_token="shpat_demo",
    )


@pytest.fixture
def make_response():
    """Build a real requests.Response without touching the network."""

    def _make_response(status_code=200, json_body=None, text=None, reason=None):
        response = requests.Response()
        response.status_code = status_code
        response.reason = reason
        response.encoding = "utf-8"
        if json_body is not None:
            text = json.dumps(json_body)
        response._content = (text or "").encode("utf-8")
        return response

    return _make_response


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def callback_params():
    """Callback query params as the platform would send them, signed."""
    params = {
        "code": "grant-code",
        "host": "dGVzdC5teXNob3AuY29tL2FkbWlu",
        "shop": SHOP,
        "state": "abc123",
        "timestamp": "1700000000",
    }
    params["hmac"] = Signer().sign(params, API_SECRET)
    return params
