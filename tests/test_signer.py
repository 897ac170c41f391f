import hashlib
import hmac
from urllib.parse import urlencode

from webob.multidict import MultiDict

from shopflow.signer import Signer

from .conftest import API_SECRET


def test_sign_then_verify(callback_params):
    signer = Signer()
    assert signer.verify(callback_params, callback_params["hmac"], API_SECRET)


def test_verify_accepts_bytes_secret(callback_params):
    signer = Signer()
    assert signer.verify(
        callback_params, callback_params["hmac"], API_SECRET.encode("utf8")
    )


def test_any_value_mutation_fails(callback_params):
    signer = Signer()
    for key in callback_params:
        if key == "hmac":
            continue
        tampered = dict(callback_params)
        value = tampered[key]
        tampered[key] = value[:-1] + ("x" if value[-1] != "x" else "y")
        assert not signer.verify(tampered, callback_params["hmac"], API_SECRET), key


def test_wrong_secret_fails(callback_params):
    assert not Signer().verify(callback_params, callback_params["hmac"], "other")


def test_signature_param_is_ignored(callback_params):
    params = dict(callback_params, signature="legacy")
    assert Signer().verify(params, callback_params["hmac"], API_SECRET)


def test_hmac_over_excluded_keys_fails(callback_params):
    # A digest computed with hmac/signature left in the message must not pass.
    params = dict(callback_params, signature="legacy")
    message = urlencode(sorted(params.items()), safe=":/")
    digest = hmac.new(
        API_SECRET.encode("utf8"), message.encode("utf8"), hashlib.sha256
    ).hexdigest()
    assert not Signer().verify(params, digest, API_SECRET)


def test_param_order_does_not_matter(callback_params):
    reordered = dict(reversed(list(callback_params.items())))
    assert Signer().verify(reordered, callback_params["hmac"], API_SECRET)


def test_encode_params_for_hmac():
    encoded = Signer().encode_params_for_hmac(
        {
            "shop": "a.myshopify.com",
            "hmac": "zzz",
            "ids[]": ["1", "2"],
            "redirect": "https://x.com/cb",
        }
    )
    assert encoded == (
        "ids=%5B%221%22%2C+%222%22%5D&redirect=https://x.com/cb&shop=a.myshopify.com"
    )


def test_multidict_array_params():
    signer = Signer()
    multi = MultiDict([("ids[]", "1"), ("ids[]", "2"), ("shop", "a.myshopify.com")])
    plain = {"ids[]": ["1", "2"], "shop": "a.myshopify.com"}
    assert signer.encode_params_for_hmac(multi) == signer.encode_params_for_hmac(plain)


def test_malformed_input_returns_false(callback_params):
    signer = Signer()
    assert not signer.verify(callback_params, None, API_SECRET)
    assert not signer.verify(callback_params, "", API_SECRET)
    assert not signer.verify(callback_params, "short", API_SECRET)
    assert not signer.verify(callback_params, "ünïcode", API_SECRET)
    assert not signer.verify(callback_params, callback_params["hmac"], None)
    assert not signer.verify(None, callback_params["hmac"], API_SECRET)
