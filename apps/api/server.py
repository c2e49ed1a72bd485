from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from apps.api.main import create_app
from core.config import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fake marketplace token server backed by a JSON fixture")
    parser.add_argument("fixture", nargs="?", help="Path to the JSON fixture file")
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--static", dest="static_dir", help="Directory of static files to serve")
    parser.add_argument("--read-only", action="store_true", default=None, help="Reject every write except token requests")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    overrides = {
        "fixture_path": args.fixture,
        "host": args.host,
        "port": args.port,
        "static_dir": args.static_dir,
        "read_only": args.read_only,
    }
    app_settings = get_settings().model_copy(update={key: value for key, value in overrides.items() if value is not None})
    app = create_app(app_settings)
    uvicorn.run(app, host=app_settings.host, port=app_settings.port, log_config=None)


if __name__ == "__main__":
    main()
