"""Server context provider: turns a server handle into prompt text.

A server handle is a mapping shaped like:

    {"name": "My Guild",
     "channels": [{"name": "general", "id": "123"}, ...],
     "roles": [{"name": "admin", "id": "456"}, ...]}
"""


def _entries(items, sigil):
    parts = []
    for item in items or []:
        name = item.get("name", "")
        ident = item.get("id", "")
        parts.append(f"{sigil}{name} ({ident})" if ident else f"{sigil}{name}")
    return ", ".join(parts) or "none"


def describe_server(server):
    """Summarize channels and roles so generated code can use real IDs."""
    if not server:
        return "No server context available."
    lines = [
        f"Server Name: {server.get('name', 'unknown')}",
        f"Channels: {_entries(server.get('channels'), '#')}",
        f"Roles: {_entries(server.get('roles'), '@')}",
    ]
    return "\n".join(lines) + "\n"
