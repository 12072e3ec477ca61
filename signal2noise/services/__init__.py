from signal2noise.services import (
    analytics_service,
    north_star_service,
    task_service,
    workflow_service,
)


__all__ = [
    "analytics_service",
    "north_star_service",
    "task_service",
    "workflow_service",
]
