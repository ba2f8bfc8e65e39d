"""
Store key layout.

    clients                     SET     [client names]
    client:{name}               STRING  client JSON
    events:{name}               HASH    {check name: event JSON}
    history:{name}              SET     [check names with retained history]
    history:{name}:{check}      LIST    check-run history
    stashes                     SET     [stash paths]
    stash:{path}                STRING  stash JSON
"""

CLIENTS = "clients"
STASHES = "stashes"


def client_key(name: str) -> str:
    return f"client:{name}"


def events_key(client_name: str) -> str:
    return f"events:{client_name}"


def history_key(client_name: str) -> str:
    return f"history:{client_name}"


def check_history_key(client_name: str, check_name: str) -> str:
    return f"history:{client_name}:{check_name}"


def stash_key(path: str) -> str:
    return f"stash:{path}"
