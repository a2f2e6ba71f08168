"""Static trail catalog.

Trail list sourced from KKL singletrack listings. Soil texture from
SoilGrids (clay/sand/silt % at 0-5cm depth); mud index derived from
clay content: >40% Very High, 30-40% High, 20-30% Medium, <20% Low.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from trailcast.utils.geo import Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Trail:
    """Static trail record."""

    id: str
    name: str
    lat: float
    lng: float
    soil_type: str
    rock_type: str
    length_km: float
    difficulty: str
    description: str
    region: str
    area: str = ""
    mud_index: str = ""

    @property
    def location(self) -> Point:
        return Point(self.lat, self.lng)

    @property
    def soil_category(self):
        # Imported here: scoring imports the catalog for HOME_LOCATION
        from trailcast.scoring.tables import soil_category
        return soil_category(self.soil_type)


@dataclass(frozen=True)
class HomeLocation:
    """Where rides start from."""

    name: str
    lat: float
    lng: float

    @property
    def location(self) -> Point:
        return Point(self.lat, self.lng)


HOME_LOCATION = HomeLocation("Tel Mond", 32.2569, 34.9194)

TRAILS_DATA = [
    # Ben Shemen / Center
    Trail(
        id="hadid-ben-shemen", name="Hadid (Green) - Ben Shemen",
        lat=31.968, lng=34.945, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=11.0, difficulty="Medium",
        description="Technical and rocky, handles rain exceptionally well.",
        region="Shfela", area="Center", mud_index="High",
    ),
    Trail(
        id="ayalon-canada", name="Ayalon-Canada Park",
        lat=31.842, lng=34.995, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=15.0, difficulty="Medium",
        description="Mostly rocky, but some clay sections can be slippery.",
        region="Shfela", area="Center", mud_index="High",
    ),
    Trail(
        id="yaar-hakdoshim", name="Yaar HaKdoshim (Martyrs' Forest)",
        lat=31.748, lng=35.055, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=14.0, difficulty="Medium",
        description="Jerusalem hills, chalky soil drains well even in winter.",
        region="Jerusalem Hills", area="Center", mud_index="High",
    ),
    Trail(
        id="nahal-alexander", name="Nahal Alexander",
        lat=32.22045, lng=34.98246, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=20.0, difficulty="Medium",
        description="Modular loops near Kochav Yair with wildflowers and panoramic views.",
        region="Sharon", area="Center", mud_index="High",
    ),
    Trail(
        id="zacharia", name="Zacharia",
        lat=31.715, lng=34.943, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=13.5, difficulty="Medium",
        description="Flow singletrack through Yeshei Forest with long gradual climbs.",
        region="Shfela", area="Center", mud_index="High",
    ),
    Trail(
        id="ein-rafe", name="Ein Rafe",
        lat=31.791, lng=35.098, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=14.0, difficulty="Medium",
        description="Jerusalem Hills singletrack along Nahal Kislom, 400m elevation gain.",
        region="Jerusalem Hills", area="Center", mud_index="High",
    ),
    # North
    Trail(
        id="alon-hagalil", name="Alon HaGalil",
        lat=32.706, lng=35.255, soil_type="Heavy Clay", rock_type="Limestone",
        length_km=18.0, difficulty="Medium",
        description="Iconic Galilee singletrack, well-drained limestone.",
        region="Galilee", area="North", mud_index="Very High",
    ),
    Trail(
        id="hazorea", name="Hazorea",
        lat=32.605, lng=35.120, soil_type="Heavy Clay", rock_type="Basalt",
        length_km=15.0, difficulty="Medium",
        description="Scenic Jezreel Valley trail, mixed basalt and chalk terrain.",
        region="Jezreel Valley", area="North", mud_index="Very High",
    ),
    Trail(
        id="sheluha-carmel", name="Sheluha - Mount Carmel",
        lat=32.652, lng=34.974, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=20.4, difficulty="Medium",
        description="Circular Carmel forest route with technical sections and fast descents.",
        region="Carmel", area="North", mud_index="High",
    ),
    Trail(
        id="birya", name="Birya Forest",
        lat=33.002, lng=35.509, soil_type="Heavy Clay", rock_type="Limestone",
        length_km=16.0, difficulty="Hard",
        description="Upper Galilee, rocky and technical. Good winter trail.",
        region="Galilee", area="North", mud_index="Very High",
    ),
    # South
    Trail(
        id="yatir", name="Yatir Forest",
        lat=31.344, lng=35.098, soil_type="Clay/Silt", rock_type="Sandstone",
        length_km=20.0, difficulty="Medium",
        description="Largest planted forest in Israel, desert edge. Always rideable.",
        region="Negev North", area="South", mud_index="High",
    ),
    Trail(
        id="gvaram", name="Gvar'am",
        lat=31.524, lng=34.575, soil_type="Clay/Silt", rock_type="Sandstone",
        length_km=12.0, difficulty="Basic",
        description="Sandy terrain, excellent drainage, rarely muddy.",
        region="Negev North", area="South", mud_index="High",
    ),
    Trail(
        id="beeri", name="Be'eri Forest",
        lat=31.430, lng=34.488, soil_type="Loam", rock_type="Sandstone",
        length_km=23.0, difficulty="Medium",
        description="Sandy negev trails near Kibbutz Be'eri.",
        region="Negev North", area="South", mud_index="Medium",
    ),
    Trail(
        id="sugar-arava", name="Sugar Trail (Arava)",
        lat=29.855, lng=35.050, soil_type="Sandy Loam", rock_type="Sandstone",
        length_km=42.0, difficulty="Hard",
        description="Desert singletrack, always rideable unless flash flood.",
        region="Arava", area="South", mud_index="Medium",
    ),
    Trail(
        id="sharsheret", name="Sharsheret Park - Gerar",
        lat=31.370, lng=34.500, soil_type="Clay/Silt", rock_type="Sandstone",
        length_km=14.5, difficulty="Medium",
        description="Sandy tracks through Gerar ravines.",
        region="Negev North", area="South", mud_index="High",
    ),
    Trail(
        id="rafa", name="Rafa Singletrack",
        lat=31.283, lng=34.352, soil_type="Sandy Loam", rock_type="Sandstone",
        length_km=18.0, difficulty="Medium",
        description="Desert-edge sand trails in the western Negev.",
        region="Negev West", area="South", mud_index="Medium",
    ),
    Trail(
        id="lahav", name="Lahav Forest",
        lat=31.379, lng=34.857, soil_type="Clay/Silt", rock_type="Limestone",
        length_km=22.0, difficulty="Medium",
        description="Negev highland forest with rocky chalk terrain.",
        region="Negev North", area="South", mud_index="High",
    ),
    Trail(
        id="rimmon-lahav", name="Rimmon - Lahav Forest",
        lat=31.362, lng=34.860, soil_type="Loam", rock_type="Limestone",
        length_km=8.0, difficulty="Medium",
        description="Forest singletrack with the Byzantine ruins of Khirbet Rimmon.",
        region="Negev North", area="South", mud_index="Medium",
    ),
]


def load_trails(trails: Optional[Iterable[Trail]] = None) -> list[Trail]:
    """Load and validate the trail catalog.

    Unknown soil types are scored with the default curve; they are
    reported here, once, rather than at scoring time.

    Args:
        trails: Trails to validate. Defaults to TRAILS_DATA.

    Returns:
        List of trails in catalog order

    Raises:
        ValueError: On duplicate ids or coordinates out of range
    """
    from trailcast.scoring.tables import is_known_soil_type

    trails = list(TRAILS_DATA if trails is None else trails)
    seen = set()

    for trail in trails:
        if trail.id in seen:
            raise ValueError(f"Duplicate trail id: {trail.id}")
        seen.add(trail.id)

        if not (-90 <= trail.lat <= 90 and -180 <= trail.lng <= 180):
            raise ValueError(f"Trail {trail.id} has invalid coordinates ({trail.lat}, {trail.lng})")

        if not is_known_soil_type(trail.soil_type):
            logger.warning(
                f"Trail {trail.id}: unknown soil type {trail.soil_type!r}, "
                f"scoring with '{trail.soil_category.value}' curve"
            )

    logger.debug(f"Loaded {len(trails)} trails")
    return trails
