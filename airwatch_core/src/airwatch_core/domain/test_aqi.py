import pytest

from airwatch_core.domain.aqi import classify, health_advice, primary_concerns
from airwatch_core.domain.errors import InvalidInput


@pytest.mark.parametrize(
    "aqi, label, severity",
    [
        (0, "Good", 0),
        (50, "Good", 0),
        (51, "Moderate", 1),
        (100, "Moderate", 1),
        (101, "Unhealthy for Sensitive Groups", 2),
        (150, "Unhealthy for Sensitive Groups", 2),
        (151, "Unhealthy", 3),
        (200, "Unhealthy", 3),
        (201, "Very Unhealthy", 4),
        (300, "Very Unhealthy", 4),
        (301, "Hazardous", 5),
        (10_000, "Hazardous", 5),
    ],
)
def test_classify_bucket_boundaries(aqi, label, severity):
    category = classify(aqi)
    assert category.label == label
    assert category.severity == severity


def test_every_category_carries_recommendations():
    for aqi in (0, 75, 125, 175, 250, 400):
        category = classify(aqi)
        assert category.recommendations
        assert category.sensitive_groups
        assert category.color


def test_classify_rejects_negative_aqi():
    with pytest.raises(InvalidInput):
        classify(-1)


@pytest.mark.parametrize("value", ["50", 50.5, True, None])
def test_classify_rejects_non_integers(value):
    with pytest.raises(InvalidInput):
        classify(value)


def test_health_advice_follows_category():
    assert health_advice(20).startswith("Air quality is good")
    assert health_advice(500).startswith("Hazardous")


def test_primary_concerns_lists_pollutants_over_threshold_in_fixed_order():
    pollutants = {"pm25": 35, "pm10": 40, "co": 1.2, "o3": 120, "no2": 42, "so2": 15}
    assert primary_concerns(pollutants) == ["PM2.5", "Ozone", "Nitrogen Dioxide"]


def test_primary_concerns_empty_for_clean_air():
    assert primary_concerns({"pm25": 5, "pm10": 10}) == []
