import dataclasses
import json

from fastapi.testclient import TestClient

from trading_dashboard.main import create_app
from trading_dashboard.routes.inputs import transform_inputs

RAW_INPUTS = {
    "FutureSymbol": "ES",
    "ExpirationDate": "2023-12-15",
    "InitialMargin": 12000,
    "DailyParameters": [
        {
            "DayOfWeek": "Monday",
            "PremiumThresholdIn": 2.5,
            "PremiumThresholdOut": 1.0,
            "AVGLength": 20,
            "UpperBandDeviation": 2,
            "LowerBandDeviation": 2,
        }
    ],
}


def inputs_client(settings, path):
    app = create_app(dataclasses.replace(settings, inputs_import_path=str(path)))
    return TestClient(app)


def test_transform_maps_pascal_case_and_fills_defaults():
    result = transform_inputs(RAW_INPUTS)

    assert result["globalSettings"]["futureSymbol"] == "ES"
    assert result["globalSettings"]["initialMargin"] == 12000
    assert result["globalSettings"]["maintenanceMargin"] == 4000
    assert result["globalSettings"]["tradingHoursStart"] == "09:30"
    assert result["globalSettings"]["globalEndTime"] is None
    assert result["dailyParameters"] == [{
        "day": "Monday",
        "premiumThresholdIn": 2.5,
        "premiumThresholdOut": 1.0,
        "avgLength": 20,
        "upperBandDeviation": 2,
        "lowerBandDeviation": 2,
    }]


def test_inputs_endpoint_reads_file(settings, tmp_path):
    path = tmp_path / "inputs.json"
    path.write_text(json.dumps(RAW_INPUTS))

    with inputs_client(settings, path) as client:
        response = client.get("/api/inputs-from-file")

    assert response.status_code == 200
    assert response.json()["dailyParameters"][0]["day"] == "Monday"


def test_inputs_endpoint_missing_file_is_404(settings, tmp_path):
    with inputs_client(settings, tmp_path / "absent.json") as client:
        response = client.get("/api/inputs-from-file")

    assert response.status_code == 404
    assert response.json()["message"] == "Inputs JSON data file not found."


def test_inputs_endpoint_unparsable_file_is_500(settings, tmp_path):
    path = tmp_path / "inputs.json"
    path.write_text("{broken")

    with inputs_client(settings, path) as client:
        response = client.get("/api/inputs-from-file")

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to parse inputs JSON data."
