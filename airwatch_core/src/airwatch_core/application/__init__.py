from .aqi_context import AQIContext, build_aqi_context
from .assistant import AirQualityAssistant
from .compare_cities import compare_cities
from .export_data import ExportRequest, export_readings
from .ingest_reading import ingest_reading
from .query_readings import get_latest_reading, get_readings_in_range, get_recent_readings

__all__ = [
    "AQIContext",
    "build_aqi_context",
    "AirQualityAssistant",
    "compare_cities",
    "ExportRequest",
    "export_readings",
    "ingest_reading",
    "get_latest_reading",
    "get_readings_in_range",
    "get_recent_readings",
]
