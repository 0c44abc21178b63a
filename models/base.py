"""
Base schemas shared by all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class CatalogPayload(BaseModel):
    """
    Base for payloads received from the remote catalog.

    The catalog mixes PascalCase and camelCase keys, so every field declares
    its wire name as an alias. Unknown keys are ignored.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )
