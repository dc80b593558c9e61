from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PaginationMeta(CamelModel):
    total: int
    limit: int
    page: int
    total_pages: int


class MessageResponse(CamelModel):
    success: bool = True
    message: str
