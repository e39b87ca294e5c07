from .notification import NotificationPreferenceRead, NotificationPreferenceUpdate
from .realtime import ChangeWebhookPayload, ChangeWebhookResponse

__all__ = [
    "ChangeWebhookPayload",
    "ChangeWebhookResponse",
    "NotificationPreferenceRead",
    "NotificationPreferenceUpdate",
]
