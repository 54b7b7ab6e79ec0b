from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from app.errors import NotFound
from app.schemas.auth_schema import UserResponseSchema
from app.schemas.user_schema import InviteUserSchema, UserListQuerySchema, UserUpdateSchema
from app.security import admin_required, get_auth_context
from app.services import user_service
from app.utils.responses import pagination_metadata, success_response

bp = Blueprint('users', __name__)

user_schema = UserResponseSchema()
users_schema = UserResponseSchema(many=True)
list_query_schema = UserListQuerySchema()
update_schema = UserUpdateSchema()
invite_schema = InviteUserSchema()


@bp.route('/me', methods=['GET'])
@jwt_required()
def get_profile():
    ctx = get_auth_context()
    user = user_service.find_by_id(ctx.user_id)
    if not user:
        raise NotFound("User not found")
    return success_response(user_schema.dump(user))


@bp.route('', methods=['GET'])
@jwt_required()
def list_users():
    """
    List users in the caller's tenant.

    Query params: page, limit, sort_by (created_at|name|email|role),
    sort_order (asc|desc)
    """
    ctx = get_auth_context()
    params = list_query_schema.load(request.args)

    result = user_service.list_users(ctx, **params)

    return success_response(
        {"users": users_schema.dump(result['users']), "total": result['total']},
        metadata=pagination_metadata(params['page'], params['limit'], result['total']),
    )


@bp.route('/stats', methods=['GET'])
@jwt_required()
@admin_required
def get_user_stats():
    ctx = get_auth_context()
    return success_response(user_service.get_user_stats(ctx.tenant_id))


@bp.route('/invite', methods=['PUT'])
@jwt_required()
@admin_required
def invite_user():
    ctx = get_auth_context()
    data = invite_schema.load(request.get_json(silent=True) or {})

    result = user_service.invite_user(ctx, data['email'], data['role'])

    current_app.logger.info("Users: invitation queued by user_id=%s", ctx.user_id)
    return success_response(result)


@bp.route('/<user_id>', methods=['PUT'])
@jwt_required()
def update_user(user_id):
    ctx = get_auth_context()
    data = update_schema.load(request.get_json(silent=True) or {})

    user = user_service.update_user(ctx, user_id, data)
    return success_response(user_schema.dump(user))


@bp.route('/<user_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def deactivate_user(user_id):
    ctx = get_auth_context()
    user = user_service.deactivate_user(ctx, user_id)
    return success_response(user_schema.dump(user))
