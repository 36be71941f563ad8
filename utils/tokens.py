import datetime
import logging

import jwt
from flask import current_app

from classes.roles import roles_of

logger = logging.getLogger(__name__)


def get_jwt_token(user):
    """Generate JWT token carrying the user's identity and org anchors."""
    if not user:
        raise ValueError("User must be provided to generate JWT token")

    expiration = datetime.datetime.now(datetime.timezone.utc) + current_app.config["JWT_EXPIRY"]
    payload = {
        "exp": expiration,
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
        "roles": sorted(r.value for r in roles_of(user)),
        "department_id": user.department_id,
        "school_id": user.school_id,
    }

    return jwt.encode(
        payload,
        current_app.config["SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def decode_jwt(token):
    """Decode and validate a JWT token; returns None when it is unusable."""
    try:
        return jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Token expired")
        return None
    except jwt.InvalidTokenError:
        logger.info("Invalid token provided")
        return None
