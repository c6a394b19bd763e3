from fastapi import Request

from app.services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    """
    Returns the UserService built during application startup.
    Tests replace this dependency through app.dependency_overrides.
    """
    service = getattr(request.app.state, "user_service", None)
    if service is None:
        raise RuntimeError("User service not initialized. Is the application lifespan running?")
    return service
