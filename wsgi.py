"""Server entry point.

Production: ``gunicorn --worker-class eventlet -w 1 wsgi:app``. A single
worker keeps the per-game locks and Socket.IO rooms in one process.
"""
import os
from werwolf import create_app
from werwolf.extensions import socketio

app = create_app()

if __name__ == "__main__":
    socketio.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        debug=app.config.get("DEBUG", False),
    )
