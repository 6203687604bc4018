from django.conf import settings

from accounts.services import is_room_admin


def room_flags(request):
    return {
        "GOOGLE_OAUTH_ENABLED": getattr(settings, "GOOGLE_OAUTH_ENABLED", False),
        "IS_ROOM_ADMIN": is_room_admin(getattr(request, "user", None)),
    }
