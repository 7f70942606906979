from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

from .materials import ALUMINIUM, COPPER, ConductorMaterial

CMIL_TO_MM2 = 0.0005067
CMIL_TO_M2 = 5.067e-10
_FEET_PER_KFT_IN_M = 304.8

# Circular-mil area keyed by the bare AWG/kcmil designation.
AWG_AREA: Dict[str, float] = {
    "22": 642, "20": 1020, "18": 1624, "16": 2583, "14": 4107, "12": 6530,
    "10": 10380, "8": 16510, "6": 26240, "4": 41740, "3": 52620, "2": 66360,
    "1": 83690, "1/0": 105600, "2/0": 133100, "3/0": 167800, "4/0": 211600,
    "250": 250000, "350": 350000, "500": 500000, "750": 750000, "1000": 1000000,
}

_SIZE_PATTERN = re.compile(r"#?\s*(\d+(?:\.\d+)?(?:/0)?)")
_KCMIL_PATTERN = re.compile(r"kcmil|mcm", re.IGNORECASE)
_SMALLEST_KCMIL = 250.0


def normalize_size(size: Any) -> str:
    """
    Canonical key for a conductor size designation.

    ``"#4/0"`` becomes ``"4/0 AWG"``, ``"500"`` and ``"500 MCM"`` become
    ``"500 kcmil"``. Unparseable input is returned stripped.
    """
    if size is None:
        return ""
    text = str(size).strip()
    if text.startswith("#"):
        text = text[1:].strip()
    match = _SIZE_PATTERN.match(text)
    if not match:
        return text
    number = match.group(1)
    if _KCMIL_PATTERN.search(text) or ("/" not in number and float(number) >= _SMALLEST_KCMIL):
        value = float(number)
        return f"{int(value) if value.is_integer() else value:g} kcmil"
    return f"{number} AWG"


@dataclass(frozen=True)
class ConductorProperties:
    """Reference record for one conductor size."""

    size: str
    area_cm: float
    rdc_cu: Optional[float] = None
    rdc_al: Optional[float] = None
    insulation_thickness_in: Optional[float] = None

    def rdc_for(self, material: ConductorMaterial) -> Optional[float]:
        return self.rdc_al if material.key == ALUMINIUM.key else self.rdc_cu


class ConductorPropertyTable:
    """Size-keyed conductor data (DC resistance at 20 °C in Ω/m, circular mils, insulation inches)."""

    def __init__(self, entries: Iterable[ConductorProperties] = ()) -> None:
        self._entries: Dict[str, ConductorProperties] = {}
        for entry in entries:
            self._entries[normalize_size(entry.size)] = entry

    def __contains__(self, size: Any) -> bool:
        return normalize_size(size) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, size: Any) -> Optional[ConductorProperties]:
        return self._entries.get(normalize_size(size))

    def sizes(self) -> list[str]:
        return list(self._entries)

    def with_entry(self, entry: ConductorProperties) -> "ConductorPropertyTable":
        merged = dict(self._entries)
        merged[normalize_size(entry.size)] = entry
        return ConductorPropertyTable(merged.values())

    @classmethod
    def from_records(cls, records: Mapping[str, Mapping[str, Any]]) -> "ConductorPropertyTable":
        entries = []
        for size, record in records.items():
            try:
                area = float(record["area_cm"])
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"Invalid conductor property record for {size!r}: {record}") from exc
            entries.append(
                ConductorProperties(
                    size=size,
                    area_cm=area,
                    rdc_cu=_maybe_float(record.get("rdc_cu")),
                    rdc_al=_maybe_float(record.get("rdc_al")),
                    insulation_thickness_in=_maybe_float(
                        record.get("insulation_thickness", record.get("insulation_thickness_in"))
                    ),
                )
            )
        return cls(entries)

    def to_records(self) -> Dict[str, Dict[str, Optional[float]]]:
        return {
            key: {
                "area_cm": entry.area_cm,
                "rdc_cu": entry.rdc_cu,
                "rdc_al": entry.rdc_al,
                "insulation_thickness": entry.insulation_thickness_in,
            }
            for key, entry in self._entries.items()
        }

    @classmethod
    def default(cls) -> "ConductorPropertyTable":
        return _DEFAULT_TABLE


def size_to_area(size: Any, table: Optional[ConductorPropertyTable] = None) -> float:
    """Conductor area in circular mils; 0.0 for an unrecognised designation."""
    if size is None:
        return 0.0
    if table is not None:
        entry = table.get(size)
        if entry is not None:
            return entry.area_cm
    text = str(size).strip()
    match = _SIZE_PATTERN.match(text)
    if not match:
        return 0.0
    if _KCMIL_PATTERN.search(text):
        return float(match.group(1)) * 1000.0
    return float(AWG_AREA.get(match.group(1), 0.0))


def _maybe_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# NEC Chapter 9 Table 8, stranded conductors, DC resistance at 75 °C in Ω/kft.
_NEC_R75_CU: Dict[str, float] = {
    "18": 7.95, "16": 4.99, "14": 3.14, "12": 1.98, "10": 1.24, "8": 0.778,
    "6": 0.491, "4": 0.308, "3": 0.245, "2": 0.194, "1": 0.154, "1/0": 0.122,
    "2/0": 0.0967, "3/0": 0.0766, "4/0": 0.0608, "250": 0.0515, "300": 0.0429,
    "350": 0.0367, "400": 0.0321, "500": 0.0258, "600": 0.0214, "700": 0.0184,
    "750": 0.0171, "800": 0.0161, "900": 0.0143, "1000": 0.0129,
}

_NEC_R75_AL: Dict[str, float] = {
    "12": 3.25, "10": 2.04, "8": 1.28, "6": 0.808, "4": 0.508, "3": 0.403,
    "2": 0.319, "1": 0.253, "1/0": 0.201, "2/0": 0.159, "3/0": 0.126, "4/0": 0.100,
    "250": 0.0847, "300": 0.0707, "350": 0.0605, "400": 0.0529, "500": 0.0424,
    "600": 0.0353, "700": 0.0303, "750": 0.0282, "800": 0.0265, "900": 0.0235,
    "1000": 0.0212,
}

_AWG_CIRCULAR_MILS: Dict[str, float] = {
    "18": 1620, "16": 2580, "14": 4110, "12": 6530, "10": 10380, "8": 16510,
    "6": 26240, "4": 41740, "3": 52620, "2": 66360, "1": 83690, "1/0": 105600,
    "2/0": 133100, "3/0": 167800, "4/0": 211600,
}


def _insulation_thickness_in(size: str, area_cm: float) -> float:
    if size in ("18", "16", "14", "12", "10"):
        return 0.045
    if size in ("8", "6", "4", "3", "2"):
        return 0.060
    if size in ("1", "1/0", "2/0", "3/0", "4/0"):
        return 0.080
    if area_cm <= 500_000:
        return 0.095
    return 0.110


def _rdc20(r75_ohm_per_kft: Optional[float], material: ConductorMaterial) -> Optional[float]:
    if r75_ohm_per_kft is None:
        return None
    return r75_ohm_per_kft / (1.0 + material.temp_coefficient_per_c * 55.0) / _FEET_PER_KFT_IN_M


def _build_default_table() -> ConductorPropertyTable:
    entries = []
    for size, r75 in _NEC_R75_CU.items():
        area = _AWG_CIRCULAR_MILS.get(size, float(size) * 1000.0 if "/" not in size else 0.0)
        entries.append(
            ConductorProperties(
                size=size,
                area_cm=area,
                rdc_cu=_rdc20(r75, COPPER),
                rdc_al=_rdc20(_NEC_R75_AL.get(size), ALUMINIUM),
                insulation_thickness_in=_insulation_thickness_in(size, area),
            )
        )
    return ConductorPropertyTable(entries)


_DEFAULT_TABLE = _build_default_table()
