"""Session anchor: plain data that outlives any single controller.

Controllers are rebuilt on every remount, but the last-triggered sentinel
has to survive that, the way a browser's session storage survives a
re-render. Keeping the raw values in this module lets controllers come
and go while the data stays for the life of the process.
"""

values: dict[str, str] = {}


def clear() -> None:
    """Forget everything, i.e. start a new session."""
    values.clear()
