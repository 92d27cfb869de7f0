"""Browser console server.

A small Flask app, served on its own port, with a SQL form. Every statement
is forwarded to the raw data server over its TCP endpoint, so the console
only works once that server is listening.
"""

import logging
import socket
from typing import Any, Dict, Optional

from flask import Flask, jsonify, render_template_string, request
from werkzeug.serving import make_server

from userapi.admin.handle import ServerHandle
from userapi.admin.raw_server import RawClient, RawServer
from userapi.exceptions import DependencyNotReadyError, RawProtocolError

logger = logging.getLogger(__name__)

CONSOLE_TEMPLATE = """<!doctype html>
<html>
<head><title>User store console</title></head>
<body>
  <h1>User store console</h1>
  <p>Connected through raw server on port {{ raw_port }}.</p>
  <form method="post">
    <textarea name="sql" rows="6" cols="80">{{ sql }}</textarea><br>
    <button type="submit">Run</button>
  </form>
  {% if reply %}
    {% if not reply.ok %}
      <p style="color: #b00">{{ reply.error }}</p>
    {% elif reply.columns is defined %}
      <table border="1" cellpadding="4">
        <tr>{% for c in reply.columns %}<th>{{ c }}</th>{% endfor %}</tr>
        {% for row in reply.rows %}
          <tr>{% for v in row %}<td>{{ v }}</td>{% endfor %}</tr>
        {% endfor %}
      </table>
    {% else %}
      <p>{{ reply.rowcount }} row(s) affected.</p>
    {% endif %}
  {% endif %}
</body>
</html>
"""


def create_console_app(raw: RawServer) -> Flask:
    app = Flask(__name__)

    def forward(sql: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            with RawClient(raw.connect_host, raw.port, raw.user, raw.password) as client:
                return client.execute(sql, params)
        except (OSError, RawProtocolError) as e:
            logger.error(f"Console could not reach raw server on port {raw.port}: {e}")
            return {"ok": False, "error": f"Raw server unavailable: {e}"}

    @app.route("/", methods=["GET", "POST"])
    def console():
        sql = request.form.get("sql", "SELECT id, name, email FROM users")
        reply = forward(sql) if request.method == "POST" else None
        return render_template_string(CONSOLE_TEMPLATE, sql=sql, reply=reply, raw_port=raw.port)

    @app.route("/query", methods=["POST"])
    def query():
        payload = request.get_json(silent=True) or {}
        reply = forward(payload.get("sql", ""), payload.get("params"))
        return jsonify(reply), (200 if reply.get("ok") else 400)

    return app


class ConsoleServer(ServerHandle):
    """Handle for the browser console; requires a running ``RawServer``."""

    name = "console server"

    def __init__(self, port: int, allow_remote: bool, raw: Optional[RawServer]):
        super().__init__(port, allow_remote)
        self.raw = raw

    def _check_dependencies(self) -> None:
        if self.raw is None or not self.raw.running:
            raise DependencyNotReadyError(
                "console server cannot start before the raw data server is running"
            )

    def _bind(self):
        # werkzeug exits the process when it fails to bind, so bind here and hand
        # it the listening descriptor
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.requested_port))
            sock.listen(128)
            return make_server(
                self.host,
                sock.getsockname()[1],
                create_console_app(self.raw),
                threaded=True,
                fd=sock.fileno(),
            )
        finally:
            sock.close()
