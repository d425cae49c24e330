from typing import Annotated, Optional
from fastapi import Depends, Query
from .config import get_settings, Settings


def resolve_page_size(
    settings: Annotated[Settings, Depends(get_settings)],
    page_size: Optional[int] = Query(default=None, ge=1, alias="pageSize", description="Items per page"),
) -> int:
    """Default page size from settings, capped at the configured maximum."""
    if page_size is None:
        return settings.default_page_size
    return min(page_size, settings.max_page_size)

PageSize = Annotated[int, Depends(resolve_page_size)]
