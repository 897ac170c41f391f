from shopflow.scopes import get_implied_scopes, missing_scopes, parse_scopes


def test_parse_scopes():
    assert parse_scopes(" read_orders, ,write_products ") == (
        "read_orders",
        "write_products",
    )
    assert parse_scopes("") == ()
    assert parse_scopes(None) == ()


def test_implied_scopes():
    assert get_implied_scopes(
        ["write_orders", "unauthenticated_write_checkouts", "read_products"]
    ) == {"read_orders", "unauthenticated_read_checkouts"}


def test_missing_scopes():
    assert missing_scopes(["read_orders"], ["write_orders"]) == []
    assert missing_scopes(["write_orders", "read_products"], ["read_orders"]) == [
        "read_products",
        "write_orders",
    ]
