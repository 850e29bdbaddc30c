"""
AQI categorization and health advisories.

Buckets use inclusive upper bounds (0-50 Good, 51-100 Moderate, ...). Every
surface of the product (HTTP context, chat prompts, voice answers) reads its
label and advice from here, so the thresholds must not drift.
"""

from dataclasses import dataclass
from typing import List, Mapping, Tuple

from airwatch_core.domain.errors import InvalidInput


@dataclass(frozen=True)
class AQICategory:
    label: str
    severity: int
    color: str
    recommendations: Tuple[str, ...]
    sensitive_groups: str
    advice: str


# (inclusive upper bound, category); the last entry catches everything above 300
_CATEGORIES: Tuple[Tuple[float, AQICategory], ...] = (
    (
        50,
        AQICategory(
            label="Good",
            severity=0,
            color="green",
            recommendations=(
                "Perfect air quality for outdoor activities",
                "Safe for all groups including sensitive individuals",
                "Ideal time for exercise and recreation",
            ),
            sensitive_groups="No precautions needed",
            advice="Air quality is good. Perfect for outdoor activities.",
        ),
    ),
    (
        100,
        AQICategory(
            label="Moderate",
            severity=1,
            color="yellow",
            recommendations=(
                "Generally safe for outdoor activities",
                "Sensitive individuals may experience minor symptoms",
                "Consider reducing prolonged outdoor exertion",
            ),
            sensitive_groups="Children and elderly should limit extended outdoor activities",
            advice="Air quality is moderate. Generally safe for most people.",
        ),
    ),
    (
        150,
        AQICategory(
            label="Unhealthy for Sensitive Groups",
            severity=2,
            color="orange",
            recommendations=(
                "Sensitive groups should limit outdoor activities",
                "Wear N95 masks when going outside",
                "Keep windows closed, use air purifiers",
            ),
            sensitive_groups=(
                "Children, elderly, and people with heart/lung conditions "
                "should avoid outdoor exertion"
            ),
            advice="Sensitive groups should limit outdoor activities.",
        ),
    ),
    (
        200,
        AQICategory(
            label="Unhealthy",
            severity=3,
            color="red",
            recommendations=(
                "Everyone should limit outdoor activities",
                "Wear N95 or better masks outside",
                "Use air purifiers indoors, avoid opening windows",
            ),
            sensitive_groups="Everyone should avoid prolonged outdoor exertion",
            advice="Everyone should limit outdoor activities and wear masks.",
        ),
    ),
    (
        300,
        AQICategory(
            label="Very Unhealthy",
            severity=4,
            color="purple",
            recommendations=(
                "Avoid outdoor activities",
                "Stay indoors with air purifiers running",
                "Wear N95 masks for any outdoor exposure",
            ),
            sensitive_groups="Sensitive groups should remain indoors",
            advice="Avoid outdoor activities. Stay indoors with air purifiers.",
        ),
    ),
    (
        float("inf"),
        AQICategory(
            label="Hazardous",
            severity=5,
            color="maroon",
            recommendations=(
                "Avoid all outdoor activities",
                "Stay indoors with air purifiers running",
                "Wear N95 masks even for brief outdoor exposure",
                "Consider relocating temporarily if possible",
            ),
            sensitive_groups="Everyone should avoid outdoor activities entirely",
            advice="Hazardous conditions. Avoid all outdoor activities.",
        ),
    ),
)

# pollutant -> concentration above which it is reported as a concern
CONCERN_THRESHOLDS: Tuple[Tuple[str, str, float], ...] = (
    ("pm25", "PM2.5", 25),
    ("pm10", "PM10", 50),
    ("co", "Carbon Monoxide", 2),
    ("o3", "Ozone", 100),
    ("no2", "Nitrogen Dioxide", 40),
    ("so2", "Sulfur Dioxide", 20),
)


def classify(aqi: int) -> AQICategory:
    """Map an AQI value to its health category.

    Raises:
        InvalidInput: ``aqi`` is negative or not an integer.
    """
    if not isinstance(aqi, int) or isinstance(aqi, bool):
        raise InvalidInput(f"AQI must be an integer, got {aqi!r}")
    if aqi < 0:
        raise InvalidInput(f"AQI must be non-negative, got {aqi}")
    for upper, category in _CATEGORIES:
        if aqi <= upper:
            return category
    raise AssertionError("unreachable")


def health_advice(aqi: int) -> str:
    return classify(aqi).advice


def primary_concerns(pollutants: Mapping[str, float]) -> List[str]:
    return [
        label
        for key, label, threshold in CONCERN_THRESHOLDS
        if (pollutants.get(key) or 0) > threshold
    ]
