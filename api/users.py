from __future__ import annotations

from flask import Blueprint, jsonify, g, abort

from models.schemas.user import UserOutSchema
from utils.decorators import jwt_required, get_session_manager

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: Account no longer exists
    """
    user = get_session_manager().directory.get_by_id(g.current_user_id)
    if not user:
        abort(404)
    return jsonify(
        {
            "data": user_out_schema.dump(user)
        }
    ), 200
