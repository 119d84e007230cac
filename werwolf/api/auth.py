"""Client identity decorator and helper."""
from functools import wraps
from typing import Callable, Any
from flask import request, g
from ..errors import UnauthorizedError
from ..utils.token_generator import generate_client_id

CLIENT_ID_HEADER = "X-Client-Id"


def require_client_id(f: Callable) -> Callable:
    """Decorator that reads the X-Client-Id header into g.client_id.

    The id is a bearer-like browser identity; which game it belongs to is
    checked by the engine for each command.

    Raises:
        UnauthorizedError: If the header is missing.
    """

    @wraps(f)
    def decorated(*args: Any, **kwargs: Any) -> Any:
        client_id = (request.headers.get(CLIENT_ID_HEADER) or "").strip()
        if not client_id:
            raise UnauthorizedError()
        g.client_id = client_id
        return f(*args, **kwargs)

    return decorated


def client_id_from_body(data: dict) -> str:
    """Return the client id a request body brings, minting one if absent.

    Args:
        data: The parsed JSON body.

    Returns:
        The client id to use for this browser.
    """
    client_id = (data.get("client_id") or request.headers.get(CLIENT_ID_HEADER) or "").strip()
    return client_id or generate_client_id()
