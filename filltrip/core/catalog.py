"""
Reference catalog of vehicle fuel efficiency.

Average real-world efficiency figures for cars and motorcycles sold in the
Philippine market, used to prefill the efficiency field of a calculation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Tuple


class VehicleCategory(Enum):
    """Catalog partitions."""
    CAR = "Car"
    MOTORCYCLE = "Motorcycle"


@dataclass(frozen=True)
class VehicleRecord:
    """A make/model efficiency entry. Never mutated after loading."""
    id: str
    make: str
    model: str
    typical_years: str  # e.g. "2015-2019"
    km_per_liter_avg: float
    category: VehicleCategory
    search_text: str = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate efficiency and index the lowercase search text."""
        if self.km_per_liter_avg <= 0:
            raise ValueError(f"km_per_liter_avg must be > 0 for {self.id}")
        object.__setattr__(self, "search_text", f"{self.make} {self.model}".lower())

    @property
    def first_year(self) -> str:
        return self.typical_years.split("-")[0]


def vehicle_label(record: VehicleRecord) -> str:
    """Display label for a selected vehicle, e.g. "2019 Toyota Vios"."""
    return f"{record.first_year} {record.make} {record.model}"


@dataclass(frozen=True)
class VehicleCatalog:
    """Read-only catalog with cars listed before motorcycles."""
    entries: Tuple[VehicleRecord, ...]

    def __iter__(self) -> Iterator[VehicleRecord]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, vehicle_id: str) -> VehicleRecord:
        """Get a catalog entry by id.

        Raises:
            ValueError: If the id is not in the catalog
        """
        for record in self.entries:
            if record.id == vehicle_id:
                return record
        raise ValueError(f"Unknown vehicle: {vehicle_id}")

    def by_category(self, category: VehicleCategory) -> List[VehicleRecord]:
        return [record for record in self.entries if record.category == category]


_CAR_MODELS = [
    # (id, make, model, typical_years, km_per_liter_avg)
    ("toyota-vios-2019", "Toyota", "Vios", "2019-2023", 16.5),
    ("toyota-vios-2013", "Toyota", "Vios", "2013-2018", 15.0),
    ("toyota-wigo", "Toyota", "Wigo", "2014-2023", 18.0),
    ("toyota-innova-diesel", "Toyota", "Innova", "2016-2022", 11.5),
    ("toyota-fortuner-diesel", "Toyota", "Fortuner", "2016-2023", 10.5),
    ("toyota-hilux-diesel", "Toyota", "Hilux", "2015-2023", 11.0),
    ("toyota-corolla-altis", "Toyota", "Corolla Altis", "2019-2023", 13.5),
    ("toyota-avanza", "Toyota", "Avanza", "2015-2021", 12.5),
    ("toyota-rush", "Toyota", "Rush", "2018-2023", 12.0),
    ("toyota-raize", "Toyota", "Raize", "2022-2024", 16.0),
    ("honda-city", "Honda", "City", "2020-2024", 16.0),
    ("honda-civic", "Honda", "Civic", "2016-2021", 13.0),
    ("honda-brio", "Honda", "Brio", "2019-2023", 17.5),
    ("honda-br-v", "Honda", "BR-V", "2017-2022", 13.0),
    ("honda-hr-v", "Honda", "HR-V", "2015-2021", 13.5),
    ("honda-cr-v", "Honda", "CR-V", "2017-2022", 11.0),
    ("mitsubishi-mirage", "Mitsubishi", "Mirage", "2013-2023", 19.0),
    ("mitsubishi-mirage-g4", "Mitsubishi", "Mirage G4", "2014-2023", 18.5),
    ("mitsubishi-xpander", "Mitsubishi", "Xpander", "2018-2023", 13.0),
    ("mitsubishi-montero-sport", "Mitsubishi", "Montero Sport", "2016-2023", 10.5),
    ("mitsubishi-strada", "Mitsubishi", "Strada", "2015-2023", 11.5),
    ("nissan-almera", "Nissan", "Almera", "2020-2024", 17.0),
    ("nissan-navara", "Nissan", "Navara", "2015-2023", 11.0),
    ("nissan-terra", "Nissan", "Terra", "2018-2023", 10.0),
    ("suzuki-ertiga", "Suzuki", "Ertiga", "2019-2023", 14.0),
    ("suzuki-dzire", "Suzuki", "Dzire", "2018-2023", 17.0),
    ("suzuki-celerio", "Suzuki", "Celerio", "2015-2021", 19.5),
    ("suzuki-swift", "Suzuki", "Swift", "2018-2023", 16.5),
    ("suzuki-jimny", "Suzuki", "Jimny", "2019-2023", 12.0),
    ("suzuki-s-presso", "Suzuki", "S-Presso", "2020-2024", 20.0),
    ("hyundai-accent", "Hyundai", "Accent", "2011-2019", 15.5),
    ("hyundai-stargazer", "Hyundai", "Stargazer", "2022-2024", 13.5),
    ("ford-ranger", "Ford", "Ranger", "2016-2022", 10.5),
    ("ford-everest", "Ford", "Everest", "2016-2022", 10.0),
    ("ford-territory", "Ford", "Territory", "2020-2024", 11.5),
    ("isuzu-d-max", "Isuzu", "D-Max", "2014-2023", 12.0),
    ("isuzu-mu-x", "Isuzu", "mu-X", "2015-2023", 11.0),
    ("kia-picanto", "Kia", "Picanto", "2017-2023", 17.0),
    ("kia-soluto", "Kia", "Soluto", "2019-2023", 15.5),
    ("geely-coolray", "Geely", "Coolray", "2020-2024", 12.5),
    ("mg-zs", "MG", "ZS", "2019-2024", 13.0),
    ("mg-5", "MG", "5", "2021-2024", 15.0),
]

_MOTORCYCLE_MODELS = [
    ("honda-click-125i", "Honda", "Click 125i", "2018-2023", 50.0),
    ("honda-click-160", "Honda", "Click 160", "2022-2024", 46.0),
    ("honda-beat", "Honda", "BeAT", "2016-2023", 55.0),
    ("honda-pcx-160", "Honda", "PCX 160", "2021-2024", 45.0),
    ("honda-adv-160", "Honda", "ADV 160", "2022-2024", 44.0),
    ("honda-xrm-125", "Honda", "XRM 125", "2015-2023", 52.0),
    ("honda-tmx-125", "Honda", "TMX 125 Alpha", "2012-2023", 55.0),
    ("honda-wave-rsx", "Honda", "Wave RSX", "2014-2023", 60.0),
    ("yamaha-mio-i-125", "Yamaha", "Mio i 125", "2015-2023", 48.0),
    ("yamaha-mio-sporty", "Yamaha", "Mio Sporty", "2013-2023", 45.0),
    ("yamaha-mio-aerox", "Yamaha", "Mio Aerox 155", "2017-2023", 42.0),
    ("yamaha-nmax-155", "Yamaha", "NMAX 155", "2016-2024", 43.0),
    ("yamaha-sniper-155", "Yamaha", "Sniper 155", "2021-2024", 40.0),
    ("yamaha-xmax-300", "Yamaha", "XMAX 300", "2018-2023", 30.0),
    ("suzuki-raider-r150", "Suzuki", "Raider R150", "2016-2023", 38.0),
    ("suzuki-smash-115", "Suzuki", "Smash 115", "2012-2023", 55.0),
    ("suzuki-burgman-street", "Suzuki", "Burgman Street 125", "2020-2024", 48.0),
    ("kawasaki-barako-175", "Kawasaki", "Barako II 175", "2014-2023", 40.0),
    ("kawasaki-rouser-ns160", "Kawasaki", "Rouser NS160", "2018-2023", 38.0),
]


def _load_catalog() -> VehicleCatalog:
    records = [
        VehicleRecord(*row, category=VehicleCategory.CAR) for row in _CAR_MODELS
    ]
    records.extend(
        VehicleRecord(*row, category=VehicleCategory.MOTORCYCLE) for row in _MOTORCYCLE_MODELS
    )
    return VehicleCatalog(tuple(records))


# Built once at import; shared read-only by every search
VEHICLE_CATALOG = _load_catalog()
