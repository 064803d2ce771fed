"""
=============================================================================
WEBWORKER - A Minimal One-Request-Per-Connection HTTP Server
=============================================================================

Each accepted connection gets its own worker, which reads one GET request,
answers it, and closes the connection.

    GET /            → 200, built-in "My web server works!" page
    GET /page.html   → 200, the file's text with <cs371date> and
                       <cs371server> substituted, wrapped in HTML
    GET /missing     → 404, "404 Not Found"

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webworker)
    ├── config.py            # ServerConfig dataclass
    ├── server.py            # WebServer: listener + thread per connection
    ├── worker.py            # WebWorker: one connection, one request
    ├── core/
    │   ├── socket_server.py # TCP accept loop
    │   └── connection.py    # Line reading / sending / closing
    ├── http/
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Header block and dates
    │   └── status_codes.py  # 200 OK / 404
    └── handlers/
        ├── resolver.py      # Target → default page / file / not found
        └── content.py       # HTML bodies and placeholder substitution

=============================================================================
QUICK START
=============================================================================

    from webworker import WebServer, ServerConfig

    WebServer(ServerConfig(port=8080, base_dir="./public")).run()

Or handle a single already-accepted socket yourself:

    from webworker import WebWorker, Connection

    WebWorker(Connection(socket=client_sock, address=addr)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .core import Connection
from .worker import WebWorker
from .server import WebServer

__all__ = ["WebServer", "WebWorker", "Connection", "ServerConfig", "__version__"]
