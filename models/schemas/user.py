from marshmallow import Schema, fields, pre_load, EXCLUDE

from models.schemas.common import UTCDateTime


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _RequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class SignupSchema(_RequestSchema):
    # emptiness and the email format are checked by the session manager
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)
    name = fields.String(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=_norm_email(data["email"]))
        return data


class LoginSchema(SignupSchema):
    name = fields.String(load_default=None)


class RefreshTokenSchema(_RequestSchema):
    refresh_token = fields.String(required=True)


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    email = fields.String(allow_none=False)
    name = fields.String(allow_none=True)
    created_at = UTCDateTime()
    updated_at = UTCDateTime()


class AuthResponseSchema(Schema):
    access_token = fields.String()
    refresh_token = fields.String()
    token_type = fields.String()
    expires_in = fields.Integer()
    user = fields.Nested(UserOutSchema)


class RefreshResponseSchema(Schema):
    access_token = fields.String()
    refresh_token = fields.String()
    token_type = fields.String()
    expires_in = fields.Integer()
