import logging
from functools import wraps

from flask import request, jsonify, g, current_app

from classes.roles import has_any_role
from utils.tokens import decode_jwt

logger = logging.getLogger(__name__)


def _request_token():
    token = request.cookies.get(current_app.config.get("AUTH_COOKIE_NAME", "access_token"))
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return None


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _request_token()
        if not token:
            return jsonify({"message": "Unauthorized"}), 401

        decoded = decode_jwt(token)
        if not decoded:
            return jsonify({"message": "Invalid or expired token"}), 401

        g.user = decoded
        return f(*args, **kwargs)

    return decorated_function


def roles_required(*roles):
    """Allow the view only for callers holding one of `roles`.

    Must sit below `login_required`.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not has_any_role(g.get("user"), *roles):
                logger.info("User %s denied access to %s", g.user.get("user_id"), request.path)
                return jsonify({"message": "Access denied"}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def current_user():
    """The `User` row behind the authenticated request, or None."""
    from models import db, User

    if "current_user" not in g:
        user_id = g.user.get("user_id") if g.get("user") else None
        g.current_user = db.session.get(User, user_id) if user_id else None
    return g.current_user
