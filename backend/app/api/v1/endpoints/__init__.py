# API endpoints
from . import auth, users, problems, public, leads, analytics, health

__all__ = ["auth", "users", "problems", "public", "leads", "analytics", "health"]
