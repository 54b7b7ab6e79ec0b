from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from app.schemas.auth_schema import LoginSchema, RefreshSchema, RegisterSchema, UserResponseSchema
from app.security import get_auth_context
from app.services import auth_service, user_service
from app.errors import NotFound
from app.extensions import limiter
from app.utils.responses import success_response

# Create Blueprint
bp = Blueprint('auth', __name__)

# Initialize schemas
register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_schema = UserResponseSchema()


def config_limit(key):
    """Rate limit string read from app config at request time, e.g. RATE_LIMIT_LOGIN."""
    return lambda: current_app.config[key]


@bp.route('/register', methods=['POST'])
@limiter.limit(config_limit('RATE_LIMIT_REGISTER'))
def register():
    """
    User Registration Endpoint

    Creates a new tenant and admin user in one transaction.
    First user in a tenant is always assigned 'admin' role.

    Request Body:
        {
            "email": "john@acme.com",
            "password": "secret123",
            "name": "John Doe",
            "tenant_name": "Acme Inc"
        }

    Returns:
        201: Registration successful with JWT tokens
        400: Validation error
        409: Email or organization name already taken
        429: Too many registrations from this client

    Response:
        {
            "success": true,
            "data": {
                "user": {...},
                "tenant": {...},
                "access_token": "eyJhbGc...",
                "refresh_token": "eyJhbGc..."
            }
        }
    """
    data = register_schema.load(request.get_json(silent=True) or {})

    result = auth_service.register(
        email=data['email'],
        password=data['password'],
        name=data['name'],
        tenant_name=data['tenant_name'],
    )

    current_app.logger.info("Auth: registered tenant_id=%s", result['tenant']['tenant_id'])
    return success_response(result, status=201)


@bp.route('/login', methods=['POST'])
@limiter.limit(config_limit('RATE_LIMIT_LOGIN'))
def login():
    """
    Login Endpoint

    Flow:
    1. Receive email, password
    2. Find user in DB and verify password hash
    3. Check user and tenant are active
    4. Return user, tenant and tokens (access 24h, refresh 7d)

    Responses:
      200 Login successful
      400 Validation error
      401 Invalid credentials / deactivated account or tenant
      429 Too many login attempts from this client
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_service.login(data['email'], data['password'])
    return success_response(result)


@bp.route('/refresh', methods=['POST'])
@limiter.limit(config_limit('RATE_LIMIT_REFRESH'))
def refresh():
    """
    Refresh Token Endpoint
    - Body: {"refresh_token": "..."}
    - Returns a new access token
    """
    data = refresh_schema.load(request.get_json(silent=True) or {})
    return success_response(auth_service.refresh_access_token(data['refresh_token']))


@bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    """
    Return current logged-in user's info.
    - Requires valid access token
    """
    ctx = get_auth_context()
    user = user_service.find_by_id(ctx.user_id)

    if not user:
        raise NotFound("User not found")

    return success_response(user_schema.dump(user))
