from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from app.schemas.auth_schema import TenantResponseSchema
from app.schemas.tenant_schema import TenantSettingsSchema, TenantUpdateSchema
from app.security import admin_required, get_auth_context
from app.services import tenant_service
from app.utils.responses import success_response

bp = Blueprint('tenants', __name__)

tenant_schema = TenantResponseSchema()
update_schema = TenantUpdateSchema()
settings_schema = TenantSettingsSchema()


@bp.route('/current', methods=['GET'])
@jwt_required()
def get_current_tenant():
    ctx = get_auth_context()
    return success_response(tenant_schema.dump(tenant_service.get_current_tenant(ctx)))


@bp.route('/usage', methods=['GET'])
@jwt_required()
def get_usage():
    """Current month's credit and request counters plus the tenant's limits."""
    ctx = get_auth_context()
    return success_response(tenant_service.get_tenant_usage(ctx.tenant_id))


@bp.route('/current', methods=['PUT'])
@jwt_required()
@admin_required
def update_current_tenant():
    ctx = get_auth_context()
    data = update_schema.load(request.get_json(silent=True) or {})
    tenant = tenant_service.update_tenant(ctx, data)
    return success_response(tenant_schema.dump(tenant))


@bp.route('/settings', methods=['PUT'])
@jwt_required()
@admin_required
def update_settings():
    """
    Merge settings into the tenant's settings blob.

    Request Body (all optional):
        {
            "ai_credits_limit": 500,
            "api_rate_limit": 20,
            "custom_branding": {"logo": "...", "primary_color": "#000", "secondary_color": "#fff"}
        }
    """
    ctx = get_auth_context()
    data = settings_schema.load(request.get_json(silent=True) or {})
    tenant = tenant_service.update_settings(ctx.tenant_id, data)
    return success_response(tenant_schema.dump(tenant))
