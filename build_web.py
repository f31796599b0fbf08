#!/usr/bin/env python3
"""Build the crate to wasm, generate web bindings with wasm-bindgen, and serve them."""

import argparse
import signal
import sys
from pathlib import Path

from wasm_config import BuildConfig, ConfigError
from wasm_pipeline import PREFIX, BuildContext, default_pipeline


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Compile to wasm32-unknown-unknown, run wasm-bindgen and preview the result"
    )
    parser.add_argument("--project-dir", type=Path, help="Crate root (default: current directory)")
    parser.add_argument("--out-dir", type=Path, help="Where wasm-bindgen writes its output (default: wasm)")
    parser.add_argument("--profile", help="Cargo profile: release, dev or a custom one (default: release)")
    parser.add_argument("--artifact", help="Name of the .wasm file without extension (default: package name)")
    parser.add_argument("--host", help="Preview server address (default: 127.0.0.1)")
    parser.add_argument("--port", help="Preview server port (default: 4000)")
    parser.add_argument(
        "--builtin-server",
        action="store_true",
        default=None,
        help="Serve with the bundled Python server instead of basic-http-server",
    )
    parser.add_argument(
        "--no-serve",
        action="store_true",
        help="Stop after generating bindings",
    )
    return parser.parse_args(argv)


def main(argv=None, environ=None):
    args = parse_args(argv)

    try:
        config = BuildConfig.from_env(
            environ,
            project_dir=args.project_dir,
            out_dir=args.out_dir,
            artifact_name=args.artifact,
            profile=args.profile,
            host=args.host,
            port=args.port,
            builtin_server=args.builtin_server,
        )
    except ConfigError as e:
        print(f"{PREFIX} error: {e}", file=sys.stderr)
        return 2

    print(f"{PREFIX} Building {config.project_dir} for {config.target}...")
    try:
        code = default_pipeline(serve=not args.no_serve).run(BuildContext(config))
    except KeyboardInterrupt:
        # Ctrl-C before the server started; exit the way a shell would
        return 128 + signal.SIGINT
    if code == 0 and args.no_serve:
        print(f"{PREFIX} Successfully generated bindings in {config.output_dir}")
    return code


if __name__ == "__main__":
    sys.exit(main())
