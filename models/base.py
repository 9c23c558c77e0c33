"""
Shared pydantic base for request and response schemas.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Trims strings, re-validates on assignment and reads from attributes.

    Schemas that carry raw CSV headers or cells turn str_strip_whitespace off;
    those values are matched verbatim.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )
