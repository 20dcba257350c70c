"""
Rug catalogue — the round supplier backed by a curated JSON file.

Every record in the catalogue is already geocoded. The supplier only keeps
records with a usable, specific location and hands out one at random per call.
"""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from rugguesser.services.geo import Coordinate, InvalidCoordinate

log = logging.getLogger(__name__)


class CatalogueError(RuntimeError):
    """The catalogue cannot be read or holds no playable rug."""


@dataclass(frozen=True, slots=True)
class RugObject:
    """A museum textile with a known origin."""

    id: str
    title: str
    image_url: str
    museum: str
    source_url: str
    raw_location: str
    location_name: str
    coordinates: Coordinate
    culture: str | None = None
    date: str | None = None
    description: str | None = None

    def to_dict(self, reveal_location: bool = True) -> dict[str, Any]:
        """Serialize the rug; without *reveal_location* the answer fields are left out."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "image_url": self.image_url,
            "museum": self.museum,
            "source_url": self.source_url,
            "date": self.date,
        }
        if reveal_location:
            data.update(
                raw_location=self.raw_location,
                location_name=self.location_name,
                coordinates=self.coordinates.as_dict(),
                description=self.description,
                culture=self.culture,
            )
        return data


def _clean_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _optional_str(value: Any) -> str | None:
    return _clean_str(value) or None


def rug_from_record(record: Mapping[str, Any]) -> RugObject | None:
    """
    Turn one catalogue record into a ``RugObject``.

    Returns None for records that cannot be scored fairly: no image, no
    location label, invalid coordinates, or a location flagged as vague.
    """
    if not record.get("specific", True):
        return None

    rug_id = _clean_str(record.get("id"))
    image_url = _clean_str(record.get("image_url"))
    location_name = _clean_str(record.get("location_name"))
    if not (rug_id and image_url and location_name):
        return None

    try:
        coordinates = Coordinate.parse({"lat": record.get("lat"), "lng": record.get("lng")})
    except InvalidCoordinate as exc:
        log.debug("Skipping rug %s: %s", rug_id, exc)
        return None

    return RugObject(
        id=rug_id,
        title=_clean_str(record.get("title")) or "Untitled",
        image_url=image_url,
        museum=_clean_str(record.get("museum")),
        source_url=_clean_str(record.get("source_url")),
        raw_location=_clean_str(record.get("raw_location")),
        location_name=location_name,
        coordinates=coordinates,
        culture=_optional_str(record.get("culture")),
        date=_optional_str(record.get("date")),
        description=_optional_str(record.get("description")),
    )


def load_catalogue(path: Path | str) -> list[RugObject]:
    """Read the catalogue file and keep the playable rugs."""
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            records = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogueError(f"Cannot read rug catalogue {path}: {exc}") from exc

    if not isinstance(records, list):
        raise CatalogueError(f"Rug catalogue {path} must hold a JSON array")

    rugs = [rug for record in records if isinstance(record, Mapping) and (rug := rug_from_record(record))]
    log.info("Loaded %d playable rugs out of %d records from %s", len(rugs), len(records), path)
    return rugs


class CatalogueSupplier:
    """Async round supplier picking a random rug from a catalogue file.

    The file is read lazily on the first call, so a missing or broken file
    surfaces as a fetch failure the engine retries.
    """

    def __init__(self, path: Path | str, rng: random.Random | None = None):
        self.path = Path(path)
        self._rng = rng or random.Random()
        self._rugs: Sequence[RugObject] | None = None

    def _get_rugs(self) -> Sequence[RugObject]:
        if self._rugs is None:
            rugs = load_catalogue(self.path)
            if not rugs:
                raise CatalogueError(f"Rug catalogue {self.path} has no playable rugs")
            self._rugs = rugs
        return self._rugs

    async def __call__(self) -> RugObject:
        return self._rng.choice(self._get_rugs())
