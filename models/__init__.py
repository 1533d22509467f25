from models.reservation import Reservation
from models.time_grid import TimeGrid, from_minutes, to_minutes

__all__ = [
    "Reservation",
    "TimeGrid",
    "from_minutes",
    "to_minutes",
]
