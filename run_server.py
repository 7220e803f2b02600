import argparse
import logging

import uvicorn

from poststore.api.server import create_app
from poststore.engine import PostStoreConfig


def main(argv=None):
    parser = argparse.ArgumentParser(description="Post Store API server")
    parser.add_argument("--host", help="Listen address (default from POSTSTORE_HOST or 127.0.0.1).")
    parser.add_argument("--port", type=int, help="Listen port (default from POSTSTORE_PORT or 3030).")
    parser.add_argument("--path", help="Collection file (default from POSTSTORE_PATH or posts.json).")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    config = PostStoreConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.path:
        config.storage.path = args.path

    print(f"Starting Post Store on http://{config.host}:{config.port} ({config.storage.path})")

    uvicorn.run(
        create_app(config=config),
        host=config.host,
        port=config.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
