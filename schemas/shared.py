from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
import math

class CamelModel(BaseModel):
    """Response models are serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class UserSummary(CamelModel):
    id: int
    name: Optional[str] = None
    image: Optional[str] = None

class Pagination(CamelModel):
    total: int
    pages: int
    page: int
    limit: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, pages=math.ceil(total / limit), page=page, limit=limit)
