"""Pydantic schemas validating caller input before it reaches storage."""

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .aggregates import round_money
from .errors import ValidationError
from .models import ProductVariation

M = TypeVar("M", bound=BaseModel)


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class Credentials(BaseModel):
    """Login form. No real credential check is performed."""

    username: str
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, value: str) -> str:
        return _require_text(value)


class VariationInput(BaseModel):
    name: str
    options: list[str] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("options")
    @classmethod
    def _options_not_blank(cls, value: list[str]) -> list[str]:
        return [_require_text(option) for option in value]


class ProductInput(BaseModel):
    """Editable product fields. price is the list price before any discount."""

    name: str
    description: str
    price: float = Field(..., gt=0)
    discount_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    variations: Optional[list[VariationInput]] = None

    @field_validator("name", "description")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("variations", mode="before")
    @classmethod
    def _accept_model_variations(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v.to_dict() if isinstance(v, ProductVariation) else v for v in value]
        return value

    def pricing(self) -> tuple[float, float | None, float | None]:
        """
        Split the input into stored price fields.

        Returns:
            (price, original_price, discount_percentage). A missing or zero
            discount yields (list price, None, None).
        """
        if not self.discount_percentage:
            return self.price, None, None
        discounted = round_money(self.price * (1 - self.discount_percentage / 100))
        return discounted, self.price, self.discount_percentage

    def product_variations(self) -> list[ProductVariation] | None:
        if not self.variations:
            return None
        return [ProductVariation(name=v.name, options=list(v.options)) for v in self.variations]


class ReviewInput(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str

    @field_validator("comment")
    @classmethod
    def _comment_not_blank(cls, value: str) -> str:
        return _require_text(value)


def validate_input(model: type[M], **values) -> M:
    """
    Build a schema instance, translating pydantic failures.

    Raises:
        ValidationError: Naming the first offending field.
    """
    try:
        return model(**values)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise ValidationError(field, first["msg"]) from e
