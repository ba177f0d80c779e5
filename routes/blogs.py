"""Blog API endpoints: published posts, single post, tags, manual refresh."""

from flask import Blueprint, current_app, jsonify, request

bp = Blueprint("blogs", __name__)


def parse_bool(value: str | None) -> bool | None:
    """Strict string-to-bool: only "true"/"false" convert, anything else is None."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def _cache():
    return current_app.extensions["blog_cache"]


@bp.route("/api/blogs")
def list_blogs():
    """Full published view. ?force=true bypasses the cache TTL."""
    force = parse_bool(request.args.get("force")) is True
    view = _cache().sync(force=force)
    return jsonify(view.to_dict())


@bp.route("/api/blogs/<post_id>")
def get_blog(post_id):
    post = _cache().sync().find_post(post_id)
    if post is None:
        return jsonify({"error": "Post not found"}), 404
    return jsonify(post.to_dict())


@bp.route("/api/tags")
def list_tags():
    view = _cache().sync()
    return jsonify({"tags": list(view.available_tags)})


@bp.route("/api/blogs/tag/<tag>")
def blogs_by_tag(tag):
    """Posts carrying *tag*, compared case-insensitively."""
    posts = _cache().sync().posts_tagged(tag)
    return jsonify({"posts": [p.to_dict() for p in posts]})


@bp.route("/api/blogs/refresh", methods=["POST"])
def refresh_blogs():
    """Force an immediate sync with the object store."""
    view = _cache().refresh()
    return jsonify({"ok": True, "posts": len(view.posts), "tags": len(view.available_tags)})


@bp.route("/api/blogs/status")
def cache_status():
    return jsonify(_cache().status)
