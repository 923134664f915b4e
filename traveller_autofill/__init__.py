"""Fill in traveller forms from uploaded documents."""

from .models import TravellerSlot
from .form import TravellerForm
from .mappings import map_to_swedish
from .service import extract_travellers

__all__ = ["TravellerSlot", "TravellerForm", "map_to_swedish", "extract_travellers"]
