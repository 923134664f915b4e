"""Core data models for the traveller form."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


UNKNOWN_NATIONALITY = "Unknown"

# Editable slot attributes and their wire names, in display order.
SLOT_FIELDS: Dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "date_of_birth": "dateOfBirth",
    "nationality": "nationality",
    "gender": "gender",
    "disability": "disability",
    "member_number": "memberNumber",
}


def is_slot_complete(slot: "TravellerSlot") -> bool:
    """Whether every required field of a slot is filled in.

    The member number is optional. Disability only needs to be defined, so an
    empty string counts as answered.
    """

    return bool(
        slot.first_name
        and slot.last_name
        and slot.date_of_birth
        and slot.nationality
        and slot.nationality != UNKNOWN_NATIONALITY
        and slot.gender
        and slot.disability is not None
    )


@dataclass
class TravellerSlot:
    id: int
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""
    nationality: str = ""
    gender: str = ""
    disability: Optional[str] = ""
    member_number: str = ""

    @property
    def is_complete(self) -> bool:
        return is_slot_complete(self)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name or 'Vuxen 18+'}".strip()
        if self.nationality:
            name = f"{name} ({self.nationality})"
        return name

    def copy(self) -> "TravellerSlot":
        return TravellerSlot(**asdict(self))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        for attr, wire_name in SLOT_FIELDS.items():
            data[wire_name] = getattr(self, attr)
        data["isComplete"] = self.is_complete
        return data


@dataclass
class DocumentContent:
    """Content pulled out of an uploaded document, ready for the model."""

    kind: str
    text: Optional[str] = None
    data_url: Optional[str] = None
    media_type: str = ""

    @property
    def is_image(self) -> bool:
        return self.kind == "image"
