"""Built-in alias reference data for Western Australian fuel deliveries."""

from __future__ import annotations

from typing import Final, NamedTuple

from tripmatch.domain.model.enums import EntityKind


class AliasSeed(NamedTuple):
    kind: EntityKind
    canonical_id: str
    alias_text: str
    confidence_boost: int
    alias_kind: str
    notes: str | None = None


_B = EntityKind.BUSINESS
_L = EntityKind.LOCATION

BUSINESS_ALIASES: Final[tuple[AliasSeed, ...]] = (
    AliasSeed(
        _B, "KCGM", "KCGM FIMISTON EX KALGOORLIE", 20, "full_name", "Captive payments format"
    ),
    AliasSeed(_B, "KCGM", "KALGOORLIE CONSOLIDATED GOLD MINES", 25, "full_name", "Official name"),
    AliasSeed(_B, "KCGM", "KCGM FIMISTON", 15, "division"),
    AliasSeed(_B, "KCGM", "FIMISTON", 10, "site_name"),
    AliasSeed(_B, "BGC", "BGC PRECAST KWINANA BEACH", 20, "full_name"),
    AliasSeed(_B, "BGC", "BGC NAVAL BASE", 20, "full_name"),
    AliasSeed(_B, "BGC", "BGC PRECAST", 15, "division"),
    AliasSeed(_B, "BGC", "BGC CONCRETE", 15, "division"),
    AliasSeed(_B, "BGC", "BGC (AUSTRALIA) PTY LTD", 25, "legal_name"),
    AliasSeed(_B, "SOUTH32_WORSLEY", "SOUTH32 WORSLEY REFINERY GARAGE", 25, "full_name"),
    AliasSeed(_B, "SOUTH32_WORSLEY", "WORSLEY REFINERY", 20, "facility"),
    AliasSeed(_B, "SOUTH32_WORSLEY", "SOUTH32 WORSLEY", 20, "company_facility"),
    AliasSeed(_B, "SOUTH32_WORSLEY", "SOUTH32", 10, "company"),
    AliasSeed(_B, "SOUTH32_WORSLEY", "WORSLEY", 15, "facility_short"),
    AliasSeed(_B, "WESTERN_POWER", "WESTERN POWER CORPORATION", 25, "full_name"),
    AliasSeed(_B, "WESTERN_POWER", "WESTERN POWER", 20, "common_name"),
    AliasSeed(_B, "WESTERN_POWER", "WPC", 15, "abbreviation"),
    AliasSeed(_B, "AIRPORT", "AU AIRPT PERTH", 25, "code_format"),
    AliasSeed(_B, "AIRPORT", "PERTH AIRPORT", 20, "full_name"),
    AliasSeed(_B, "AIRPORT", "PERTH INTERNATIONAL AIRPORT", 25, "official_name"),
    AliasSeed(_B, "AIRPORT", "AU AIRPORT PERTH", 20, "system_format"),
    AliasSeed(_B, "AWR_FORRESTFIELD", "AWR FORRESTFIELD T70 CARRIER", 25, "full_name"),
    AliasSeed(_B, "AWR_FORRESTFIELD", "AWR FORRESTFIELD", 20, "facility"),
    AliasSeed(_B, "AWR_FORRESTFIELD", "AWR", 10, "company"),
    AliasSeed(_B, "JUNDEE_MINE", "JUNDEE MINE – NJE BULK", 25, "full_name"),
    AliasSeed(_B, "JUNDEE_MINE", "JUNDEE MINE", 20, "facility"),
    AliasSeed(_B, "JUNDEE_MINE", "JUNDEE", 15, "site_name"),
    AliasSeed(_B, "JUNDEE_MINE", "NJE BULK", 10, "operator"),
)

LOCATION_ALIASES: Final[tuple[AliasSeed, ...]] = (
    AliasSeed(_L, "KWINANA", "KWINANA BEACH", 15, "area_detail", "perth_metro"),
    AliasSeed(_L, "KWINANA", "KWINANA INDUSTRIAL AREA", 20, "full_name", "perth_metro"),
    AliasSeed(_L, "NAVAL_BASE", "NAVAL BASE", 20, "suburb_name", "perth_metro"),
    AliasSeed(_L, "FORRESTFIELD", "FORRESTFIELD", 20, "suburb_name", "perth_metro"),
    AliasSeed(_L, "KALGOORLIE", "KALGOORLIE-BOULDER", 20, "official_name", "goldfields"),
    AliasSeed(_L, "KALGOORLIE", "KALGOORLIE", 20, "common_name", "goldfields"),
    AliasSeed(_L, "FIMISTON", "FIMISTON", 15, "mine_site", "goldfields"),
    AliasSeed(_L, "GERALDTON", "GERALDTON", 20, "city_name", "mid_west"),
    AliasSeed(_L, "PORT_HEDLAND", "PORT HEDLAND", 20, "city_name", "pilbara"),
    AliasSeed(_L, "NEWMAN", "NEWMAN", 20, "town_name", "pilbara"),
    AliasSeed(_L, "BROOME", "BROOME", 20, "city_name", "kimberley"),
    AliasSeed(_L, "BUNBURY", "BUNBURY", 20, "city_name", "south_west"),
    AliasSeed(_L, "ALBANY", "ALBANY", 20, "city_name", "great_southern"),
    AliasSeed(_L, "ESPERANCE", "ESPERANCE", 20, "city_name", "goldfields_esperance"),
)

TERMINALS: Final[tuple[str, ...]] = (
    "Kewdale",
    "Geraldton",
    "Kalgoorlie",
    "Esperance",
    "Albany",
    "Bunbury",
    "Fremantle",
    "Coogee Rockingham",
)
_CAPTIVE_FORMAT_TERMINALS: Final = frozenset(TERMINALS) - {"Coogee Rockingham"}


def _terminal_aliases() -> tuple[AliasSeed, ...]:
    seeds: list[AliasSeed] = []
    for name in TERMINALS:
        upper = name.upper()
        if name in _CAPTIVE_FORMAT_TERMINALS:
            seeds.append(
                AliasSeed(EntityKind.TERMINAL, name, f"AU TERM {upper}", 25, "captive_format")
            )
        else:
            seeds.append(
                AliasSeed(EntityKind.TERMINAL, name, f"AU THDPTY {upper}", 25, "captive_format_alt")
            )
        seeds.append(AliasSeed(EntityKind.TERMINAL, name, f"TERMINAL {upper}", 20, "mtdata_format"))
        seeds.append(AliasSeed(EntityKind.TERMINAL, name, upper, 15, "short_name"))
    return tuple(seeds)


TERMINAL_ALIASES: Final[tuple[AliasSeed, ...]] = _terminal_aliases()

DEFAULT_ALIAS_SEED: Final[tuple[AliasSeed, ...]] = (
    BUSINESS_ALIASES + LOCATION_ALIASES + TERMINAL_ALIASES
)
