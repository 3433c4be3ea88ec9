from src.services import (
    batch_service,
    bulk_update_service,
    merge_service,
    selection_service,
)


__all__ = [
    "batch_service",
    "bulk_update_service",
    "merge_service",
    "selection_service",
]
