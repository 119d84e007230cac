"""Row-level change notifications.

Every insert, update and delete flushed by the ORM is recorded on the
session and emitted once the transaction commits. A rollback drops the
recorded changes, so observers never hear about writes that did not happen.
"""
import enum
from datetime import datetime
from typing import Any
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session
from ..extensions import db
from ..models.game import Game

_CHANGES_KEY = "werwolf_row_changes"


def register_change_feed() -> None:
    """Attach the session listeners. Safe to call more than once."""
    if not event.contains(db.session, "after_flush", _record_changes):
        event.listen(db.session, "after_flush", _record_changes)
        event.listen(db.session, "after_commit", _publish_changes)
        event.listen(db.session, "after_rollback", _discard_changes)


def serialize_row(obj: Any) -> dict[str, Any]:
    """Turn the loaded column values of a model instance into JSON-safe data.

    Only values already in memory are read, so this never issues SQL.

    Args:
        obj: A mapped model instance.

    Returns:
        Dict of column name to value.
    """
    state = inspect(obj)
    row: dict[str, Any] = {}
    for attr in state.mapper.column_attrs:
        if attr.key in state.dict:
            row[attr.key] = _plain(state.dict[attr.key])
    if state.identity is not None:
        for column, value in zip(state.mapper.primary_key, state.identity):
            row.setdefault(column.key, value)
    return row


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _game_id_of(obj: Any, row: dict[str, Any]) -> int | None:
    if isinstance(obj, Game):
        return row.get("id")
    return row.get("game_id")


def _record_changes(session: Session, flush_context: Any) -> None:
    changes = session.info.setdefault(_CHANGES_KEY, [])
    batches = (
        ("insert", session.new),
        ("update", [o for o in session.dirty if session.is_modified(o, include_collections=False)]),
        ("delete", session.deleted),
    )
    for change_type, objects in batches:
        for obj in objects:
            row = serialize_row(obj)
            game_id = _game_id_of(obj, row)
            if game_id is None:
                continue
            changes.append({
                "game_id": game_id,
                "table": obj.__tablename__,
                "type": change_type,
                "row": row,
            })


def _publish_changes(session: Session) -> None:
    changes = session.info.pop(_CHANGES_KEY, None)
    if changes:
        from .emitters import emit_row_changes
        emit_row_changes(changes)


def _discard_changes(session: Session) -> None:
    session.info.pop(_CHANGES_KEY, None)
