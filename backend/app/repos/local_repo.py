"""
Local file-based repository for imported localities.
Each county is stored as one JSON file under data/localities/.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List

from app.core.config import settings
from app.core.logger import logs
from app.models.places_model import PlaceEntry


class LocalityRepository:
    """Repository for storing county localities in local JSON files."""

    def __init__(self, base_dir: str | Path = None):
        """Initialize local storage directories."""
        self.base_dir = Path(base_dir or settings.DATA_DIR)
        self.localities_dir = self.base_dir / "localities"

        # Create directories if they don't exist
        self.localities_dir.mkdir(parents=True, exist_ok=True)

        logs.log(logging.INFO, f"Locality repository initialized at {self.localities_dir}")

    def _get_county_file(self, county_name: str) -> Path:
        """Get the file path for a county's localities."""
        # Sanitize county name for filename
        safe_name = county_name.strip().lower().replace(" ", "_").replace("/", "_")
        return self.localities_dir / f"{safe_name}.json"

    def get_localities(self, county_name: str) -> List[dict]:
        """Retrieve stored localities for a county."""
        county_file = self._get_county_file(county_name)
        if not county_file.exists():
            return []

        with open(county_file, "r", encoding="utf-8") as f:
            stored = json.load(f)
        return stored.get("localities", [])

    def add_localities(self, county_name: str, places: List[PlaceEntry]) -> int:
        """
        Append places not yet stored for the county (matched by name,
        case-insensitively). Returns how many were added.
        """
        existing = self.get_localities(county_name)
        existing_names = {loc["name"].strip().lower() for loc in existing}

        new_localities = []
        for place in places:
            key = place.name.strip().lower()
            if key in existing_names:
                continue
            existing_names.add(key)
            new_localities.append({
                "name": place.name,
                "place_type": place.place_type,
                "kind": place.kind.value,
                "centre_lat": place.lat,
                "centre_lng": place.lon,
                "osm_id": str(place.external_id),
            })

        if not new_localities:
            return 0

        county_file = self._get_county_file(county_name)
        with open(county_file, "w", encoding="utf-8") as f:
            json.dump({
                "county": county_name,
                "localities": existing + new_localities,
                "last_updated": datetime.now().isoformat(),
            }, f, indent=2)

        return len(new_localities)
