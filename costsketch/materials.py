"""Material rate catalogue used to price drawn rooms."""
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

from .errors import UnknownMaterialError


@dataclass(frozen=True)
class MaterialRate:
    key: str
    name: str
    color: str
    cost_per_unit: float
    tier: str = "free"


# key: (display name, cost per m², color, tier)
_CATALOGUE: Dict[str, Tuple[str, float, str, str]] = {
    "timber":            ("Timber Flooring",    120, "#8B4513", "free"),
    "carpet":            ("Carpet",              43, "#7B68EE", "free"),
    "tiles":             ("Ceramic Tiles",       70, "#B0C4DE", "free"),
    "laminate":          ("Laminate",            34, "#DEB887", "free"),
    "vinyl":             ("Vinyl",               28, "#696969", "free"),
    "hardwood_oak":      ("Hardwood Oak",       185, "#8B4513", "pro"),
    "hardwood_maple":    ("Hardwood Maple",     165, "#D2B48C", "pro"),
    "engineered_timber": ("Engineered Timber",   95, "#CD853F", "pro"),
    "bamboo":            ("Bamboo Flooring",     78, "#9ACD32", "pro"),
    "cork":              ("Cork Flooring",       85, "#F4A460", "pro"),
    "porcelain_tiles":   ("Porcelain Tiles",     95, "#E6E6FA", "pro"),
    "natural_stone":     ("Natural Stone",      145, "#708090", "pro"),
    "marble":            ("Marble",             225, "#F8F8FF", "pro"),
    "granite":           ("Granite",            195, "#2F4F4F", "pro"),
    "luxury_vinyl":      ("Luxury Vinyl Plank",  65, "#8B7D6B", "pro"),
    "epoxy_resin":       ("Epoxy Resin",        125, "#4682B4", "pro"),
    "polished_concrete": ("Polished Concrete",   95, "#A9A9A9", "pro"),
    "rubber_flooring":   ("Rubber Flooring",     55, "#2F2F2F", "pro"),
    "terrazzo":          ("Terrazzo",           135, "#FAEBD7", "pro"),
}


class MaterialRateTable(Mapping):
    """Read-only ``key -> MaterialRate`` mapping."""

    def __init__(self, rates: Mapping[str, MaterialRate]):
        self._rates = MappingProxyType(dict(rates))

    @classmethod
    def default(cls) -> "MaterialRateTable":
        return cls({k: MaterialRate(k, name, color, float(cost), tier)
                    for k, (name, cost, color, tier) in _CATALOGUE.items()})

    def __getitem__(self, key: str) -> MaterialRate:
        try:
            return self._rates[key]
        except KeyError:
            raise UnknownMaterialError(key) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def by_tier(self, tier: str):
        return [r for r in self._rates.values() if r.tier == tier]


MATERIALS = MaterialRateTable.default()
