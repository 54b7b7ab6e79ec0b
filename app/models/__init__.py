from app.models.tenant import Tenant
from app.models.user import User
from app.models.team_member import TeamMember
from app.models.subscription import Subscription
from app.models.usage import Usage
from app.models.ai_request import AiRequest
from app.models.webhook_event import WebhookEvent

__all__ = [
    'Tenant',
    'User',
    'TeamMember',
    'Subscription',
    'Usage',
    'AiRequest',
    'WebhookEvent',
]
