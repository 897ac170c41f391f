from webob.cookies import SignedSerializer


STATE_COOKIE_SALT = "shopflow.state"


def get_default_signed_serializer(
    secret, salt=STATE_COOKIE_SALT, hashalg="sha512", serializer=None
):
    return SignedSerializer(secret, salt or STATE_COOKIE_SALT, hashalg, serializer=serializer)
