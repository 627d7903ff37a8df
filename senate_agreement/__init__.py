"""
Senate Agreement Dashboard Package.

This package loads Senate member metadata and voting records, computes how
often senators vote alike, and renders agreement views that refresh when the
member selection changes.
"""

from .events import EventDispatcher, EventType
from .state import Congress
from .data_acquisition import (
    DataLoader,
    LoaderState,
    LoadError,
    FetchFailure,
    ParseFailure,
    LoaderStateError,
)
from .preprocessing import VoteRecordPreprocessor
from .network_builder import AgreementNetworkBuilder
from .analysis import AgreementAnalyzer
from .visualization import AgreementVisualizer

__version__ = "1.0.0"
__all__ = [
    "EventDispatcher",
    "EventType",
    "Congress",
    "DataLoader",
    "LoaderState",
    "LoadError",
    "FetchFailure",
    "ParseFailure",
    "LoaderStateError",
    "VoteRecordPreprocessor",
    "AgreementNetworkBuilder",
    "AgreementAnalyzer",
    "AgreementVisualizer",
]
