from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional
from pydantic import AfterValidator, Field, StringConstraints, model_validator
from app.schemas.common import CamelModel
from app.schemas.metal import MetalRef


def normalize_chemical_name(value: str) -> str:
    return value.upper()


ChemicalName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=100),
    AfterValidator(normalize_chemical_name),
]


class MetalCompatibilityIn(CamelModel):
    metal: Annotated[int, Field(ge=1)]  # metal id
    is_compatible: bool


class CompatibilityCreate(CamelModel):
    chemical_name: ChemicalName
    compatibilities: Annotated[List[MetalCompatibilityIn], Field(min_length=1)]


class CompatibilityUpdate(CamelModel):
    chemical_name: Optional[ChemicalName] = None
    compatibilities: Optional[List[MetalCompatibilityIn]] = None

    @model_validator(mode="after")
    def require_one_field(self):
        if self.chemical_name is None and self.compatibilities is None:
            raise ValueError("At least one field must be provided for update")
        return self


class MetalCompatibilityOut(CamelModel):
    metal: MetalRef
    is_compatible: bool


class CompatibilityResponse(CamelModel):
    id: int
    chemical_name: str
    compatibilities: List[MetalCompatibilityOut]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VersionedCompatibilityResponse(CamelModel):
    success: bool = True
    message: str
    version: int
    data: List[CompatibilityResponse]


class VersionResponse(CamelModel):
    version: int


class MatrixView(CamelModel):
    chemicals: List[str]
    metals: List[str]
    # Each row: {"chemicalName": str, <metal name>: true | false | null}
    matrix: List[Dict[str, Any]]
