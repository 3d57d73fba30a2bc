import json
import logging
import sys
import threading
import time
from pathlib import Path

import pytest
from flask import Flask, Response, request
from werkzeug.serving import make_server

# Allow running the tests from a checkout without installing the package
CLIENT_DIR = Path(__file__).parent.parent / "client"
sys.path.insert(0, str(CLIENT_DIR))


class FakeTextbelt:
    """
    Flask stand-in for the Textbelt API.

    Replies are registered per path; every incoming request is recorded so
    tests can check exactly which fields were sent.
    """

    def __init__(self):
        self.replies = {}
        self.requests = []
        self.delay = 0.0
        self.trickle = 0.0
        self.app = Flask("fake_textbelt")
        self.app.add_url_rule("/<path:path>", "handle", self._handle, methods=["GET", "POST"])

    def reply(self, path, body, status=200):
        self.replies[path] = (body, status)

    @property
    def last(self):
        return self.requests[-1]

    def _handle(self, path):
        path = "/" + path
        self.requests.append({
            "method": request.method,
            "path": path,
            "form": request.form.to_dict(),
            "args": request.args.to_dict(),
        })
        if self.delay:
            time.sleep(self.delay)

        body, status = self.replies.get(path, ({"success": False, "error": "Unknown endpoint"}, 404))
        if isinstance(body, str):
            return Response(body, status=status, mimetype="text/plain")
        payload = json.dumps(body)
        if self.trickle:
            return Response(self._drip(payload), status=status, mimetype="application/json")
        return Response(payload, status=status, mimetype="application/json")

    def _drip(self, payload):
        # One byte at a time, each well inside any per-read timeout
        for ch in payload:
            time.sleep(self.trickle)
            yield ch


@pytest.fixture
def textbelt():
    fake = FakeTextbelt()
    # Keep the fake server's per-request access log out of the CLI's captured stdout
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    server = make_server("127.0.0.1", 0, fake.app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    fake.url = f"http://127.0.0.1:{server.server_port}"
    try:
        yield fake
    finally:
        server.shutdown()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's real config and TEXTBELT_* variables out of the tests"""
    for name in ("TEXTBELT_CONFIG", "TEXTBELT_API_KEY", "TEXTBELT_URL", "TEXTBELT_TIMEOUT", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    # The fake server lives on localhost; a proxy from the environment would intercept it
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
