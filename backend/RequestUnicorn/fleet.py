"""backend.RequestUnicorn.fleet

The fixed fleet of unicorns available for dispatch.

`FLEET` is defined once at import time and never mutated, so concurrent
invocations can read it freely. `find_unicorn` picks one entry uniformly at
random; the pickup location is only logged.
"""

import logging
import random
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unicorn:
    name: str
    color: str
    gender: str

    def to_dict(self):
        """Serialize to the shape used in responses and stored ride records."""
        return {"Name": self.name, "Color": self.color, "Gender": self.gender}


FLEET = (
    Unicorn(name="Bucephalus", color="Golden", gender="Male"),
    Unicorn(name="Shadowfax", color="White", gender="Male"),
    Unicorn(name="Rocinante", color="Yellow", gender="Female"),
)


def find_unicorn(pickup_location):
    """Select a unicorn for the given pickup location.

    Args:
        pickup_location (dict): Mapping with `Latitude` and `Longitude` keys.

    Returns:
        Unicorn: one entry of `FLEET`, chosen uniformly at random.
    """
    logger.info(
        "Finding unicorn for %s, %s",
        pickup_location["Latitude"],
        pickup_location["Longitude"],
    )
    return random.choice(FLEET)
