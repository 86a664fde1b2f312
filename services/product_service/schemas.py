from pydantic import BaseModel, ConfigDict, Field, field_validator

# Bounds of the 32-bit INTEGER columns/parameters the backend accepts.
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1


class ProductForm(BaseModel):
    """Fields accepted from the create/edit forms."""

    name: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(..., ge=INT32_MIN, le=INT32_MAX)
    description: str = Field(..., min_length=1, max_length=500)

    @field_validator("name", "description", mode="before")
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quantity: int
    description: str
