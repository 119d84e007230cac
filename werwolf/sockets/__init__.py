"""Register all Socket.IO handlers and the change feed."""


def register_handlers() -> None:
    """Import handler modules so their @socketio.on decorators are registered."""
    from . import handlers  # noqa: F401
    from .change_feed import register_change_feed
    register_change_feed()
