"""HTTP front end for a shared provider.

Lets processes that cannot embed the provider share one quota budget.

Endpoints::

    GET /integers?num=N&min=A&max=B&base=10
    GET /quota
    GET /health
"""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlparse

from truerand.config import ABS_MAX, ABS_MIN
from truerand.errors import ErrorKind, ProviderError

if TYPE_CHECKING:
    from truerand.provider import RandomnessProvider

log = logging.getLogger(__name__)

_STATUS_FOR_KIND = {
    ErrorKind.NOT_INITIALIZED: 503,
    ErrorKind.ADDRESS_RESOLUTION: 503,
    ErrorKind.TRANSPORT: 502,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.PARSE: 502,
}


def _make_handler(provider: RandomnessProvider):
    """Create request handler with provider reference."""

    class ProviderHandler(BaseHTTPRequestHandler):
        _provider = provider

        def do_GET(self) -> None:
            parsed = urlparse(self.path)
            path = parsed.path.rstrip("/")
            params = parse_qs(parsed.query)

            if path == "/integers":
                self._handle_integers(params)
            elif path == "/quota":
                self._json_response(200, {"quota": self._provider.quota})
            elif path == "/health":
                self._handle_health()
            else:
                self._json_response(404, {"error": "not found"})

        def _handle_integers(self, params: dict) -> None:
            try:
                num = int(params.get("num", [1])[0])
                low = int(params.get("min", [ABS_MIN])[0])
                high = int(params.get("max", [ABS_MAX])[0])
                base = int(params.get("base", [10])[0])
            except ValueError:
                self._json_response(400, {"error": "num, min, max and base must be integers"})
                return

            try:
                result = self._provider.try_next_batch(low, high, num, base)
            except ValueError as e:
                self._json_response(400, {"error": str(e), "success": False})
                return
            if result.error is not None:
                self._error_response(result.error)
                return
            self._json_response(200, {
                "data": result.values,
                "length": len(result.values),
                "source": result.source.value,
                "success": True,
            })

        def _handle_health(self) -> None:
            status = self._provider.status()
            status["status"] = "ready" if status["ready"] else "uninitialized"
            self._json_response(200, status)

        def _error_response(self, err: ProviderError) -> None:
            code = _STATUS_FOR_KIND.get(err.kind, 500)
            self._json_response(code, {"error": str(err), "kind": err.kind.value, "success": False})

        def _json_response(self, code: int, data: dict) -> None:
            body = json.dumps(data).encode()
            self.send_response(code)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            log.debug("%s - " + format, self.address_string(), *args)

    return ProviderHandler


def make_server(provider: RandomnessProvider, host: str = "127.0.0.1", port: int = 8043) -> ThreadingHTTPServer:
    return ThreadingHTTPServer((host, port), _make_handler(provider))


def run_server(provider: RandomnessProvider, host: str = "127.0.0.1", port: int = 8043) -> None:
    """Run the HTTP server until interrupted."""
    server = make_server(provider, host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
