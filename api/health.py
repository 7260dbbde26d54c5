from flask import Blueprint

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: healthy
            service:
              type: string
              example: auth-service
    """
    return {"status": "healthy", "service": "auth-service"}, 200
