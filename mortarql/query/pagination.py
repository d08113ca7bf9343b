"""Pagination result model."""
from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_PER_PAGE = 15


class Page(BaseModel):
    """One page of rows returned by ``SelectQueryBuilder.paginate``.

    Attributes:
        items: Rows on this page, as column-name → value mappings.
        total: Number of rows the unpaginated query would return.
        page: 1-based page number.
        per_page: Page size.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    items: list[dict[str, Any]] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def last_page(self) -> int:
        """Number of the last page; at least 1, even for an empty result."""
        return max(1, math.ceil(self.total / self.per_page))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_more(self) -> bool:
        return self.page < self.last_page
