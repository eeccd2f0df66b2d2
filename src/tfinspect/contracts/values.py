"""Results of static (literal-only) expression evaluation."""

from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, Field


class Known(BaseModel):
    """The expression reduced to a literal value."""
    kind: Literal["known"] = "known"
    value: Any = Field(..., description="string, number, bool, null, list or mapping")

    class Config:
        frozen = True


class NotStatic(BaseModel):
    """The expression cannot be reduced without evaluating the configuration."""
    kind: Literal["not_static"] = "not_static"
    reason: str = Field(..., description="Why the expression is not statically known")
    malformed: bool = Field(False, description="True when the literal syntax itself is unsupported")

    class Config:
        frozen = True


LiteralResult = Annotated[Union[Known, NotStatic], Field(discriminator="kind")]
