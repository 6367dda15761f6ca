from staffquiz.router.api.auth import router as auth_router
from staffquiz.router.api.users import router as users_router
from staffquiz.router.api.admin import router as admin_router
__all__ = [
    "auth_router",
    "users_router",
    "admin_router",
]
