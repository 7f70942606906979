"""Thermal and ampacity engine for underground electrical ductbanks."""

from ductbank.analysis import CableReportRow, DuctbankReport, analyze_ductbank, over_limit
from ductbank.errors import InvalidConductorSize, Issue
from ductbank.log import configure_logging

__version__ = "0.1.0"

__all__ = [
    "CableReportRow",
    "DuctbankReport",
    "InvalidConductorSize",
    "Issue",
    "analyze_ductbank",
    "configure_logging",
    "over_limit",
]
