"""English-to-Swedish value tables for the traveller form."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple


GENDER = MappingProxyType(
    {
        "male": "Man",
        "female": "Kvinna",
        "other": "Annat",
    }
)

NATIONALITY = MappingProxyType(
    {
        "Swedish": "Sverige",
        "Norwegian": "Norge",
        "Danish": "Danmark",
        "Finnish": "Finland",
        "Unknown": "",
    }
)

DISABILITY = MappingProxyType(
    {
        "None": "Inget funktionshinder",
        "Mobility impairment": "Rörelsehinder",
        "Visual impairment": "Synskada",
        "Hearing impairment": "Hörselskada",
    }
)

VALUE_MAPPINGS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "gender": GENDER,
        "nationality": NATIONALITY,
        "disability": DISABILITY,
    }
)

OTHER_OPTION = "Annat"


def map_to_swedish(value: Optional[str], field: str) -> Optional[str]:
    """Translate an extracted value into its Swedish display string.

    Values missing from the table are returned unchanged.
    """

    try:
        table = VALUE_MAPPINGS[field]
    except KeyError as exc:
        raise ValueError(f"No value mapping for field '{field}'.") from exc
    if value is None:
        return None
    return table.get(value, value)


def select_options(field: str) -> Tuple[str, ...]:
    """Choices offered by the editor for a mapped field."""

    options = [v for v in VALUE_MAPPINGS[field].values() if v]
    if OTHER_OPTION not in options:
        options.append(OTHER_OPTION)
    return tuple(options)
