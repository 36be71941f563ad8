import logging

from flask import Blueprint, request, jsonify, make_response, current_app, g

from classes.roles import roles_of
from models.users import User
from utils.tokens import get_jwt_token
from utils.utils import login_required

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth_bp', __name__)


def _set_auth_cookie(response, token, max_age):
    response.set_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "access_token"), token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", True),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "None"),
        path="/",
        max_age=max_age,
    )


# Login
@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password")

    if not email or not password:
        return jsonify({"message": "Email and password are required"}), 400

    user = User.query.filter_by(email=email).first()

    if not user or not user.is_active or not user.check_password(password):
        logger.info("Failed login for %s", email)
        return jsonify({"message": "Invalid credentials"}), 401

    token = get_jwt_token(user)
    response = make_response(jsonify({
        "message": "Login successful",
        "user": {
            **user.to_dict(),
            "roles": sorted(r.value for r in roles_of(user)),
        },
    }))
    _set_auth_cookie(response, token, int(current_app.config["JWT_EXPIRY"].total_seconds()))
    return response


# Logout
@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = make_response(jsonify({"message": "Logout successful"}))
    _set_auth_cookie(response, "", 0)
    return response


# Auth Check
@auth_bp.route('/check-auth', methods=['GET'])
@login_required
def check_auth():
    return jsonify({
        "authenticated": True,
        "user": {
            "id": g.user.get("user_id"),
            "email": g.user.get("email"),
            "role": g.user.get("role"),
            "roles": g.user.get("roles", []),
            "department": g.user.get("department_id"),
            "school": g.user.get("school_id"),
        },
    }), 200
