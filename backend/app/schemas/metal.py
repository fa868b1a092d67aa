from datetime import datetime
from typing import Annotated, Optional
from pydantic import AfterValidator, StringConstraints, model_validator
from app.schemas.common import CamelModel

# Matrix rows key the chemical under this name, next to one key per metal
MATRIX_LABEL_KEY = "chemicalName"


def reject_matrix_label(value: str) -> str:
    if value.lower() == MATRIX_LABEL_KEY.lower():
        raise ValueError(f"Metal name '{value}' is reserved")
    return value


MetalName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=100),
    AfterValidator(reject_matrix_label),
]


class MetalCreate(CamelModel):
    name: MetalName


class MetalUpdate(CamelModel):
    name: Optional[MetalName] = None

    @model_validator(mode="after")
    def require_one_field(self):
        if self.name is None:
            raise ValueError("At least one field must be provided for update")
        return self


class MetalRef(CamelModel):
    id: int
    name: str


class MetalResponse(MetalRef):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
