UNAUTHENTICATED_WRITE_PREFIX = "unauthenticated_write_"


UNAUTHENTICATED_READ_PREFIX = "unauthenticated_read_"


WRITE_PREFIX = "write_"


READ_PREFIX = "read_"


def parse_scopes(scopes_str):
    """Split "read_orders, write_orders" into a tuple of scope names."""
    if not scopes_str:
        return ()
    return tuple(scope.strip() for scope in scopes_str.split(",") if scope.strip())


def get_implied_scopes(scopes):
    implied_scopes = set()
    for scope in scopes:
        if scope.startswith(UNAUTHENTICATED_WRITE_PREFIX):
            implied_scopes.add(
                UNAUTHENTICATED_READ_PREFIX
                + scope.removeprefix(UNAUTHENTICATED_WRITE_PREFIX)
            )
        elif scope.startswith(WRITE_PREFIX):
            implied_scopes.add(READ_PREFIX + scope.removeprefix(WRITE_PREFIX))
    return implied_scopes


def missing_scopes(requested_scopes, granted_scopes):
    """Return requested scopes that the grant does not cover, sorted."""
    covered = set(granted_scopes).union(get_implied_scopes(granted_scopes))
    return sorted(set(requested_scopes) - covered)
