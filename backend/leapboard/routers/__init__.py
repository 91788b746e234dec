from leapboard.routers import content, health, leaderboards, me, reports

__all__ = [
    "content",
    "health",
    "leaderboards",
    "me",
    "reports",
]
