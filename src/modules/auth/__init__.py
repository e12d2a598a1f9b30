"""Authentication: JWT bearer tokens and role checks."""

from src.modules.auth.auth import (
    AuthenticatedUser,
    create_access_token,
    get_current_user,
    require_platform_admin,
)
