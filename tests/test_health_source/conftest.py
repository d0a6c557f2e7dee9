"""Fixtures with realistic Garmin API response dicts for testing."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

# 2024-06-01T08:00:00Z
START_MS = 1717228800000


@pytest.fixture
def garmin_activity() -> dict:
    """One entry of a realistic get_activities() response."""
    return {
        "activityId": 15012345678,
        "activityName": "Morning Run",
        "startTimeLocal": "2024-06-01 10:00:00",
        "startTimeGMT": "2024-06-01 08:00:00",
        "activityType": {"typeId": 1, "typeKey": "running", "parentTypeId": 17},
        "distance": 5200.0,
        "duration": 1795.2,
        "elapsedDuration": 1800.0,
        "movingDuration": 1780.0,
        "calories": 310.0,
        "bmrCalories": 40.0,
        "averageHR": 148.0,
        "maxHR": 171.0,
        "vO2MaxValue": 52.0,
        "floorsClimbed": 3,
    }


@pytest.fixture
def garmin_details() -> dict:
    """Realistic get_activity_details() response: three metric rows and a polyline."""
    descriptors = [
        "directTimestamp",
        "directHeartRate",
        "directSpeed",
        "directPower",
        "sumDistance",
        "directDoubleCadence",
        "directStrideLength",
        "directGroundContactBalanceLeft",
        "directVerticalOscillation",
        "directGroundContactTime",
        "directAirTemperature",
    ]
    rows = [
        [START_MS, 140.0, 3.1, 240.0, 0.0, 170.0, 110.0, 50.5, 8.4, 250.0, 18.0],
        [START_MS + 5000, 145.0, 3.3, 255.0, 16.0, 172.0, 112.0, 49.0, 8.6, 245.0, 18.0],
        [START_MS + 10000, None, 3.2, 250.0, 32.5, 174.0, 111.0, 51.0, 8.5, 248.0, 18.5],
    ]
    return {
        "activityId": 15012345678,
        "measurementCount": len(descriptors),
        "metricsCount": len(rows),
        "metricDescriptors": [
            {"metricsIndex": i, "key": key, "unit": {"id": i, "key": "dimensionless"}}
            for i, key in enumerate(descriptors)
        ],
        "activityDetailMetrics": [{"metrics": row} for row in rows],
        "geoPolylineDTO": {
            "startPoint": {"lat": 47.60, "lon": -122.33},
            "polyline": [
                {"lat": 47.6000, "lon": -122.3300, "altitude": 12.0, "time": START_MS, "valid": True},
                {"lat": 47.6001, "lon": -122.3300, "altitude": 12.4, "time": START_MS + 5000, "valid": True},
                {"lat": 47.6002, "lon": -122.3301, "altitude": None, "time": START_MS + 10000, "valid": True},
            ],
        },
    }


@pytest.fixture
def garmin_splits() -> dict:
    """Realistic get_activity_splits() response with two laps."""
    return {
        "activityId": 15012345678,
        "lapDTOs": [
            {
                "startTimeGMT": "2024-06-01T08:05:00.0",
                "duration": 290.0,
                "lapIndex": 2,
            },
            {
                "startTimeGMT": "2024-06-01T08:00:00.0",
                "elapsedDuration": 300.0,
                "lapIndex": 1,
            },
        ],
    }


@pytest.fixture
def mock_garmin(garmin_activity, garmin_details, garmin_splits):
    """A Garmin session mock returning the fixtures above."""
    mock = MagicMock()
    mock.get_activities.return_value = [garmin_activity]
    mock.get_activity_details.return_value = garmin_details
    mock.get_activity_splits.return_value = garmin_splits
    return mock
