"""Services package."""
from src.services import (
    contact_service,
    query_service,
    record_store,
    seed_service,
    simulator,
    task_service,
)

__all__ = [
    "contact_service",
    "query_service",
    "record_store",
    "seed_service",
    "simulator",
    "task_service",
]
