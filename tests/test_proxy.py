import pytest
import requests

from shopflow.errors import UpstreamError
from shopflow.proxy import ResourceProxy

from .conftest import SHOP


def test_fetch_resource(config, session, make_response):
    session.get.return_value = make_response(200, {"shop": {"name": "Test"}})
    resource = ResourceProxy(config, session=session).fetch_resource(
        SHOP, "shpat_123", "/shop.json"
    )

    assert resource.status_code == 200
    assert resource.json() == {"shop": {"name": "Test"}}
    assert resource.content_type == "application/json"
    session.get.assert_called_once_with(
        f"https://{SHOP}/admin/shop.json",
        headers={
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": "shpat_123",
        },
        timeout=10,
    )


def test_body_is_forwarded_verbatim(config, session, make_response):
    body = '{"customers": [],  "extra":1}'
    session.get.return_value = make_response(200, text=body)
    resource = ResourceProxy(config, session=session).fetch_resource(
        SHOP, "t", "customers.json"
    )
    assert resource.body == body


def test_upstream_status_propagates(config, session, make_response):
    session.get.return_value = make_response(
        401, {"errors": "[API] Invalid API key or access token"}
    )
    with pytest.raises(UpstreamError) as exc_info:
        ResourceProxy(config, session=session).fetch_resource(SHOP, "t", "shop.json")
    assert exc_info.value.status_code == 401
    assert exc_info.value.description == "[API] Invalid API key or access token"


def test_non_json_success(config, session, make_response):
    session.get.return_value = make_response(200, text="<html></html>")
    with pytest.raises(UpstreamError) as exc_info:
        ResourceProxy(config, session=session).fetch_resource(SHOP, "t", "shop.json")
    assert exc_info.value.status_code == 502


def test_timeout(config, session):
    session.get.side_effect = requests.ReadTimeout("slow")
    with pytest.raises(UpstreamError) as exc_info:
        ResourceProxy(config, session=session).fetch_resource(SHOP, "t", "shop.json")
    assert exc_info.value.status_code == 504
