#!/usr/bin/env python3
"""Simple HTTP server with correct MIME types for WASM"""

import argparse
import http.server
import socketserver
import sys
from functools import partial
from pathlib import Path


class WasmHandler(http.server.SimpleHTTPRequestHandler):
    extensions_map = {
        **http.server.SimpleHTTPRequestHandler.extensions_map,
        ".wasm": "application/wasm",
        ".js": "application/javascript",
        ".mjs": "application/javascript",
    }

    def end_headers(self):
        # rebuilt glue must never come from the browser cache
        self.send_header("Cache-Control", "no-store")
        super().end_headers()


class PreviewServer(socketserver.ThreadingMixIn, http.server.HTTPServer):
    daemon_threads = True
    allow_reuse_address = True


def make_server(directory, host="127.0.0.1", port=4000):
    root = Path(directory).resolve()
    if not root.is_dir():
        raise SystemExit(f"directory not found: {root}")
    handler = partial(WasmHandler, directory=str(root))
    return PreviewServer((host, port), handler)


def serve_directory(directory, host="127.0.0.1", port=4000):
    with make_server(directory, host, port) as httpd:
        host, port = httpd.server_address[:2]
        print(f"Serving {Path(directory).resolve()} at http://{host}:{port}/")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down...")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve a directory with WASM-friendly headers.")
    parser.add_argument("directory", nargs="?", default="wasm")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=4000)
    args = parser.parse_args(argv)
    return serve_directory(args.directory, args.host, args.port)


if __name__ == "__main__":
    sys.exit(main())
