#!/usr/bin/env python3
"""Blog server: REST API over an incrementally cached object-store blog + SPA frontend."""

import argparse
import logging

from flask import Flask, send_from_directory

from config import (
    ASSET_BASE_URL,
    CACHE_IGNORE,
    CACHE_TTL_SECONDS,
    DOCUMENT_SUFFIX,
    EXCERPT_LENGTH,
    FETCH_WORKERS,
    FRONTEND_DIR,
    PORT,
    RESOLVE_WIKILINKS,
    S3_ACCESS_KEY_ID,
    S3_BUCKET,
    S3_ENDPOINT,
    S3_REGION,
    S3_SECRET_ACCESS_KEY,
)
from routes.blogs import bp as blogs_bp
from services.blog_cache import BlogCache
from services.ignore import IgnoreFilter
from services.links import LinkRewriter
from services.store import S3Store

log = logging.getLogger(__name__)


def build_blog_cache() -> BlogCache:
    """Blog cache wired to the configured S3 bucket."""
    store = S3Store(
        S3_BUCKET,
        endpoint=S3_ENDPOINT,
        region=S3_REGION,
        access_key_id=S3_ACCESS_KEY_ID,
        secret_access_key=S3_SECRET_ACCESS_KEY,
        suffix=DOCUMENT_SUFFIX,
    )
    return BlogCache(
        store,
        ignore=IgnoreFilter.parse(CACHE_IGNORE),
        ttl=CACHE_TTL_SECONDS,
        excerpt_length=EXCERPT_LENGTH,
        transformer=LinkRewriter(ASSET_BASE_URL) if RESOLVE_WIKILINKS else None,
        max_workers=FETCH_WORKERS,
    )


def create_app(cache: BlogCache | None = None) -> Flask:
    app = Flask(__name__, static_folder=FRONTEND_DIR, static_url_path="")
    app.extensions["blog_cache"] = cache if cache is not None else build_blog_cache()
    app.register_blueprint(blogs_bp)

    @app.route("/")
    def index():
        return send_from_directory(FRONTEND_DIR, "index.html")

    @app.route("/<path:path>")
    def spa(path):  # noqa: ARG001
        """Catch-all for SPA client-side routing."""
        return send_from_directory(FRONTEND_DIR, "index.html")

    return app


app = create_app()


def main():
    """Entry point for `markdown-blog` CLI command."""
    parser = argparse.ArgumentParser(description="Markdown Blog Server")
    parser.add_argument(
        "--port", type=int, default=PORT, help=f"Port to listen on (default: {PORT})"
    )
    cli_args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print("\n  Markdown Blog Server v0.1.0")
    print(f"  Port: {cli_args.port}")
    print(f"  Bucket: {S3_BUCKET}" + (f" @ {S3_ENDPOINT}" if S3_ENDPOINT else ""))
    print(f"  Cache TTL: {CACHE_TTL_SECONDS}s")
    print(f"  Ignore: {CACHE_IGNORE or '(none)'}\n")

    # Warm the cache before accepting requests
    view = app.extensions["blog_cache"].sync()
    log.info("Initial load: %d posts", len(view.posts))

    app.run(port=cli_args.port, threaded=True)


if __name__ == "__main__":
    main()
