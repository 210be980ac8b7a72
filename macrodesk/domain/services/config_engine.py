"""
CONFIG ENGINE
Load, validate, and expose the instrument catalog

RESPONSIBILITIES:
- Load YAML instrument configuration
- Validate configuration integrity
- Expose read-only typed objects

RULES:
❌ No defaults if config missing
✅ Fail fast on invalid config
✅ Deterministic output
"""

import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from macrodesk.domain.models import Instrument, ProviderName

_REQUIRED_FIELDS = ("key", "name", "symbol", "provider", "type")


@dataclass(frozen=True)
class InstrumentCatalog:
    """Collection of all configured instruments"""
    instruments: Tuple[Instrument, ...]

    @property
    def groups(self) -> List[str]:
        seen: List[str] = []
        for instrument in self.instruments:
            if instrument.group not in seen:
                seen.append(instrument.group)
        return seen

    def get(self, key: str) -> Instrument:
        """Get instrument by key"""
        for instrument in self.instruments:
            if instrument.key == key:
                return instrument
        raise ValueError(f"Instrument not found: {key}")

    def get_group(self, group: str) -> List[Instrument]:
        """Instruments of one group, in configuration order"""
        return [i for i in self.instruments if i.group == group]


class ConfigEngine:
    """
    Configuration Engine
    Single source of truth for the instrument catalog
    """

    def __init__(self, config_file: Path):
        """Initialize with path to instruments.yml"""
        self.config_file = Path(config_file)
        self._catalog: InstrumentCatalog = None

    def load_all(self) -> None:
        """Load and validate the catalog"""
        if not self.config_file.exists():
            raise FileNotFoundError(f"Instrument config not found: {self.config_file}")

        with open(self.config_file, "r") as f:
            data = yaml.safe_load(f) or {}

        groups: Dict[str, list] = data.get("groups") or {}
        if not groups:
            raise ValueError("Instrument config defines no groups")

        instruments = []
        for group, entries in groups.items():
            for entry in entries or []:
                instruments.append(self._parse_instrument(group, entry))

        keys = [i.key for i in instruments]
        if len(keys) != len(set(keys)):
            raise ValueError("Duplicate instrument keys found in configuration")

        self._catalog = InstrumentCatalog(instruments=tuple(instruments))

    @staticmethod
    def _parse_instrument(group: str, entry: Dict) -> Instrument:
        missing = [f for f in _REQUIRED_FIELDS if not entry.get(f)]
        if missing:
            raise ValueError(
                f"Instrument in group '{group}' missing fields: {', '.join(missing)}"
            )
        try:
            provider = ProviderName(str(entry["provider"]).lower())
        except ValueError:
            raise ValueError(
                f"Unknown provider '{entry['provider']}' for instrument {entry['key']}"
            )
        return Instrument(
            key=str(entry["key"]),
            name=str(entry["name"]),
            symbol=str(entry["symbol"]),
            provider=provider,
            type=str(entry["type"]),
            spot_price=bool(entry.get("spot_price", True)),
            group=group,
        )

    @property
    def catalog(self) -> InstrumentCatalog:
        if self._catalog is None:
            raise RuntimeError("Config not loaded. Call load_all() first")
        return self._catalog
