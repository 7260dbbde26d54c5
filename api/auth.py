"""
Authentication blueprint:
- POST /auth/signup
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/verify

The implementation:
- Delegates every credential operation to the SessionManager built in create_app()
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256)
- Refresh tokens are single use: /auth/refresh revokes the presented token and returns a new pair
- Error bodies come from api/errors.py; 401s use one generic message per flow
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models.schemas.user import (
    SignupSchema,
    LoginSchema,
    RefreshTokenSchema,
    AuthResponseSchema,
    RefreshResponseSchema,
)
from utils.decorators import bearer_token_from_header, get_session_manager

bp = Blueprint("auth", __name__)

signup_schema = SignupSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
auth_response_schema = AuthResponseSchema()
refresh_response_schema = RefreshResponseSchema()


@bp.post("/signup")
def signup():
    """
    Register a new user and open a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password, name]
          properties:
            email: { type: string }
            password: { type: string }
            name: { type: string }
    responses:
      201:
        description: Created (returns tokens and the new user)
      400:
        description: Invalid input
      409:
        description: Email already registered
    """
    payload = request.get_json(silent=True) or {}
    data = signup_schema.load(payload)

    issued = get_session_manager().signup(data["email"], data["password"], data["name"])
    return jsonify(auth_response_schema.dump(issued)), 201


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Invalid input
      401:
        description: Invalid email or password
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    issued = get_session_manager().login(data["email"], data["password"])
    return jsonify(auth_response_schema.dump(issued)), 200


@bp.post("/refresh")
def refresh():
    """
    Use a refresh token to obtain new access and refresh tokens (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refresh_token]
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns a new token pair)
      400:
        description: Missing refresh token
      401:
        description: Invalid, expired or revoked refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_token_schema.load(payload)

    issued = get_session_manager().refresh(data["refresh_token"])
    return jsonify(refresh_response_schema.dump(issued)), 200


@bp.post("/logout")
def logout():
    """
    logout: revokes the refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refresh_token]
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: Logged out
      400:
        description: Missing refresh token
      401:
        description: Invalid or already revoked refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_token_schema.load(payload)

    get_session_manager().logout(data["refresh_token"])
    return jsonify({"message": "Logged out successfully"}), 200


@bp.get("/verify")
def verify():
    """
    Verify an access token from the Authorization header
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Token is valid
      401:
        description: Missing or invalid header or token
    """
    token = bearer_token_from_header(request.headers.get("Authorization"))
    identity = get_session_manager().verify_access_token(token)
    return jsonify(
        {
            "valid": True,
            "user_id": identity.user_id,
            "email": identity.email,
        }
    ), 200
