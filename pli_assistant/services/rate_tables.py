"""Premium Rate Tables

Loads the per-frequency premium rate tables (rate per 5000 sum assured,
keyed by entry age then maturity age) from a JSON document:

    {
      "monthly":     {"30": {"55": 21.0, "60": 17.5}, ...},
      "half-yearly": {...},
      "yearly":      {...}
    }

Keys other than the three frequencies are ignored, so the file may carry
notes or provenance fields.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pli_assistant.models.policy import Frequency
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)

RateTable = Dict[int, Dict[int, float]]


class RateTableError(Exception):
    """Raised when rate tables cannot be loaded."""

    pass


class RateTables:
    """Read-only lookup over the three premium rate tables."""

    def __init__(self, tables: Mapping[Frequency, RateTable]):
        self._tables: Dict[Frequency, RateTable] = {
            frequency: dict(tables.get(frequency, {})) for frequency in Frequency
        }

    def rate(
        self, frequency: Frequency, entry_age: int, maturity_age: int
    ) -> Optional[float]:
        """Rate per 5000 sum assured, or None for an unsupported combination"""
        return self._tables[frequency].get(entry_age, {}).get(maturity_age)

    def entry_ages(self, frequency: Frequency) -> List[int]:
        return sorted(self._tables[frequency])

    def is_empty(self) -> bool:
        return not any(self._tables.values())

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RateTables":
        """Build tables from the JSON document shape, coercing keys to int"""
        tables: Dict[Frequency, RateTable] = {}
        try:
            for frequency in Frequency:
                by_age = raw.get(frequency.value, {})
                tables[frequency] = {
                    int(age): {
                        int(maturity): float(rate) for maturity, rate in by_maturity.items()
                    }
                    for age, by_maturity in by_age.items()
                }
        except (AttributeError, TypeError, ValueError) as e:
            raise RateTableError(f"Malformed rate table: {e}") from e
        return cls(tables)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RateTables":
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise RateTableError(f"Rate table file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise RateTableError(f"Rate table file is not valid JSON: {path}: {e}") from e

        if not isinstance(raw, dict):
            raise RateTableError(f"Rate table root must be an object: {path}")

        tables = cls.from_dict(raw)
        logger.info(
            "Rate tables loaded",
            path=str(path),
            entry_ages={f.value: len(tables.entry_ages(f)) for f in Frequency},
        )
        return tables
