"""ecolight library modules."""

from .assembler import ResultAssembler, Verdict, evaluate_fallback, evaluate_requirement
from .catalog import CatalogError, PlantCatalog, PlantLightRequirement, default_catalog
from .matcher import PlantMatcher
from .readings import LightReadingBuffer, Sample, decode_trace, encode_trace
from .records import PersistedRequestRecord
from .scheduler import ManualScheduler, ThreadScheduler
from .session import AnalysisSession, AnalysisSessionController, SessionState
from .storage import JsonRecordStore, PersistenceGateway, StorageError

__all__ = [
    "AnalysisSession",
    "AnalysisSessionController",
    "CatalogError",
    "JsonRecordStore",
    "LightReadingBuffer",
    "ManualScheduler",
    "PersistedRequestRecord",
    "PersistenceGateway",
    "PlantCatalog",
    "PlantLightRequirement",
    "PlantMatcher",
    "ResultAssembler",
    "Sample",
    "SessionState",
    "StorageError",
    "ThreadScheduler",
    "Verdict",
    "decode_trace",
    "default_catalog",
    "encode_trace",
    "evaluate_fallback",
    "evaluate_requirement",
]
