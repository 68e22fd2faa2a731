"""Static lookup from short location codes to CWA county/city names."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from app.errors import InvalidLocationError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/locations")


@dataclass(frozen=True)
class Location:
    """A supported location: request code, canonical CWA name, optional alternate spelling."""
    code: str
    name: str
    fallback_name: Optional[str] = None

    def query_names(self) -> list[str]:
        """Names to send upstream, canonical first."""
        names = [self.name]
        if self.fallback_name and self.fallback_name != self.name:
            names.append(self.fallback_name)
        return names


def _loc(code: str, name: str) -> Location:
    # CWA uses 臺 in official names; older datasets and users often write 台.
    fallback = name.replace("臺", "台") if "臺" in name else None
    return Location(code=code, name=name, fallback_name=fallback)


LOCATIONS: Mapping[str, Location] = MappingProxyType({
    loc.code: loc
    for loc in (
        _loc("taipei", "臺北市"),
        _loc("new_taipei", "新北市"),
        _loc("keelung", "基隆市"),
        _loc("taoyuan", "桃園市"),
        _loc("hsinchu_city", "新竹市"),
        _loc("hsinchu_county", "新竹縣"),
        _loc("miaoli", "苗栗縣"),
        _loc("taichung", "臺中市"),
        _loc("changhua", "彰化縣"),
        _loc("nantou", "南投縣"),
        _loc("yunlin", "雲林縣"),
        _loc("chiayi_city", "嘉義市"),
        _loc("chiayi_county", "嘉義縣"),
        _loc("tainan", "臺南市"),
        _loc("kaohsiung", "高雄市"),
        _loc("pingtung", "屏東縣"),
        _loc("yilan", "宜蘭縣"),
        _loc("hualien", "花蓮縣"),
        _loc("taitung", "臺東縣"),
        _loc("penghu", "澎湖縣"),
        _loc("kinmen", "金門縣"),
        _loc("lienchiang", "連江縣"),
    )
})


def resolve_location(code: str | None) -> Location:
    """Look up a location code (case-insensitive); raise InvalidLocationError if unknown."""
    key = (code or "").strip().lower()
    location = LOCATIONS.get(key)
    if location is None:
        logger.warning(f"Unknown location code: {code!r}")
        raise InvalidLocationError(
            f"Unknown location code: {code}",
            details={"supported": sorted(LOCATIONS)},
        )
    return location


def list_locations() -> dict[str, str]:
    """Code -> canonical name, in table order."""
    return {code: loc.name for code, loc in LOCATIONS.items()}
