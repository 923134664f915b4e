"""Output schema shared by the model call and the API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


MAX_TRAVELLERS = 5


class ExtractedTraveller(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    date_of_birth: str = Field(..., alias="dateOfBirth")
    gender: str
    nationality: str
    disability: Optional[str] = None


class GlobalInfo(BaseModel):
    nationality: Optional[str] = None
    disability: Optional[str] = None


class ExtractionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    travellers: List[ExtractedTraveller] = Field(..., max_length=MAX_TRAVELLERS)
    global_info: GlobalInfo = Field(..., alias="globalInfo")


_NULLABLE_STRING = {"type": ["string", "null"]}

# Strict structured-output schema: every property is required, optional values are nullable.
TRAVELLER_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "travellers": {
            "type": "array",
            "maxItems": MAX_TRAVELLERS,
            "items": {
                "type": "object",
                "properties": {
                    "firstName": {"type": "string"},
                    "lastName": {"type": "string"},
                    "dateOfBirth": {"type": "string"},
                    "gender": {"type": "string"},
                    "nationality": {"type": "string"},
                    "disability": _NULLABLE_STRING,
                },
                "required": [
                    "firstName",
                    "lastName",
                    "dateOfBirth",
                    "gender",
                    "nationality",
                    "disability",
                ],
                "additionalProperties": False,
            },
        },
        "globalInfo": {
            "type": "object",
            "properties": {
                "nationality": _NULLABLE_STRING,
                "disability": _NULLABLE_STRING,
            },
            "required": ["nationality", "disability"],
            "additionalProperties": False,
        },
    },
    "required": ["travellers", "globalInfo"],
    "additionalProperties": False,
}
