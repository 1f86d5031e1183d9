"""Integration tests for the ledger HTTP API.

Runs the full application over an in-memory store with the default
room set (room-1..room-8, PIN 1234) and a mocked AI collaborator.
"""

import json

import pytest
from fastapi.testclient import TestClient

from rentledger.api.app import create_app
from rentledger.services.analysis_service import AnalysisService, fallback_message

ADMIN = {"X-Admin-Pin": "1234"}
TENANT = {"X-Room-Pin": "1234"}


def _bill(payload: dict, room_id: str) -> dict:
    return next(bill for bill in payload["bills"] if bill["room_id"] == room_id)


class TestAuthentication:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_admin_login(self, client):
        assert client.post("/api/auth/admin", json={"pin": "1234"}).json()["ok"] is True
        assert client.post("/api/auth/admin", json={"pin": "0000"}).status_code == 401

    def test_room_login(self, client):
        response = client.post("/api/auth/rooms/room-3", json={"pin": "1234"})

        assert response.status_code == 200
        assert response.json()["room_name"] == "Phòng 3"
        assert client.post("/api/auth/rooms/room-3", json={"pin": "9"}).status_code == 401
        assert client.post("/api/auth/rooms/room-99", json={"pin": "1234"}).status_code == 404

    def test_admin_endpoints_require_pin(self, client):
        assert client.get("/api/periods/2024-05/bills").status_code == 401
        assert client.get("/api/periods/2024-05/bills", headers={"X-Admin-Pin": "1"}).status_code == 401

    def test_current_period(self, client):
        data = client.get("/api/periods/current").json()

        assert len(data["period"]) == 7
        assert data["previous"] < data["period"] < data["next"]


class TestBilling:
    def test_bills_open_period_for_every_room(self, client, store):
        response = client.get("/api/periods/2024-05/bills", headers=ADMIN)

        assert response.status_code == 200
        data = response.json()
        assert len(data["bills"]) == 8
        room = _bill(data, "room-1")
        assert room["reading"]["month"] == "2024-05"
        assert room["reading"]["paid"] is False
        assert room["charge"]["total"] == 3_650_000
        assert data["summary"]["expected"] == 8 * 3_650_000
        stored = json.loads(store.values["readings"])
        assert any(r["month"] == "2024-05" for r in stored)

    def test_invalid_period(self, client):
        assert client.get("/api/periods/2024-13/bills", headers=ADMIN).status_code == 400
        assert client.get("/api/periods/May-2024/summary", headers=ADMIN).status_code == 400

    def test_meter_entry_carries_into_next_period(self, client):
        client.get("/api/periods/2024-05/bills", headers=ADMIN)
        client.get("/api/periods/2024-06/bills", headers=ADMIN)

        response = client.put(
            "/api/periods/2024-05/rooms/room-1/meters/electricity",
            json={"value": 100},
            headers=ADMIN,
        )

        assert response.status_code == 200
        bill = response.json()
        assert bill["reading"]["currElectricity"] == 100
        assert bill["charge"]["electricity_amount"] == 350_000
        assert bill["charge"]["total"] == 4_000_000
        june = _bill(client.get("/api/periods/2024-06/bills", headers=ADMIN).json(), "room-1")
        assert june["reading"]["prevElectricity"] == 100
        assert june["reading"]["currElectricity"] == 0
        assert june["charge"]["electricity_usage"] == 0

    def test_meter_entry_errors(self, client):
        url = "/api/periods/2024-05/rooms/{room}/meters/{meter}"

        assert client.put(url.format(room="room-99", meter="water"), json={"value": 1}, headers=ADMIN).status_code == 404
        assert client.put(url.format(room="room-1", meter="gas"), json={"value": 1}, headers=ADMIN).status_code == 422
        assert client.put(url.format(room="room-1", meter="water"), json={"value": -1}, headers=ADMIN).status_code == 422

    def test_paid_and_summary(self, client):
        client.put("/api/periods/2024-05/rooms/room-1/meters/electricity", json={"value": 100}, headers=ADMIN)
        client.put("/api/periods/2024-05/rooms/room-1/other-fees", json={"amount": 50_000}, headers=ADMIN)
        paid = client.put("/api/periods/2024-05/rooms/room-1/paid", json={"paid": True}, headers=ADMIN)

        assert paid.json()["reading"]["paid"] is True
        summary = client.get("/api/periods/2024-05/summary", headers=ADMIN).json()
        assert summary["collected"] == 4_050_000
        assert summary["expected"] == 7 * 3_650_000 + 4_050_000
        assert summary["unpaid"] == 7 * 3_650_000
        assert summary["paid_count"] == 1
        assert summary["unpaid_count"] == 7
        assert summary["total_electricity"] == 100

    def test_summary_of_unopened_period_is_empty(self, client):
        summary = client.get("/api/periods/2020-01/summary", headers=ADMIN).json()

        assert summary["expected"] == 0
        assert summary["paid_count"] == 0


class TestExport:
    def test_csv_export(self, client):
        client.put("/api/periods/2024-05/rooms/room-2/meters/water", json={"value": 4}, headers=ADMIN)

        response = client.get("/api/periods/2024-05/export", headers=ADMIN)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "Bao_Cao_Nha_Tro_Thang_2024-05.csv" in response.headers["content-disposition"]
        assert response.content.startswith(b"\xef\xbb\xbf")
        lines = response.content.decode("utf-8-sig").splitlines()
        assert lines[0].startswith("Phòng,Chỉ số Điện Cũ,Chỉ số Điện Mới")
        assert len(lines) == 9
        room_2 = next(line for line in lines if line.startswith("Phòng 2,"))
        assert ",4," in room_2
        assert room_2.endswith("Chưa thanh toán")

    def test_export_of_unopened_period_has_only_header(self, client):
        response = client.get("/api/periods/2019-01/export", headers=ADMIN)

        lines = response.content.decode("utf-8-sig").splitlines()
        assert len(lines) == 1
        assert lines[0].endswith("Trạng thái")


class TestAnalysis:
    def test_analysis_is_stored_until_cleared(self, client, analysis_service):
        response = client.post("/api/periods/2024-05/analysis", headers=ADMIN)

        assert response.json() == {"period": "2024-05", "text": "## Báo cáo"}
        analysis_service.summarize.assert_awaited_once()
        assert client.get("/api/analysis", headers=ADMIN).json()["text"] == "## Báo cáo"
        client.delete("/api/analysis", headers=ADMIN)
        assert client.get("/api/analysis", headers=ADMIN).json() == {"period": None, "text": None}

    def test_unavailable_model_returns_fallback(self, store):
        app = create_app(store=store, analysis_service=AnalysisService(enabled=False))
        with TestClient(app) as client:
            response = client.post("/api/periods/2024-05/analysis", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["text"] == fallback_message()


class TestTenant:
    def test_tenant_bill_and_meter(self, client):
        response = client.put(
            "/api/tenant/room-4/periods/2024-05/meters/water",
            json={"value": 3},
            headers=TENANT,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["bill"]["room_id"] == "room-4"
        assert data["bill"]["reading"]["currWater"] == 3
        assert data["bill"]["charge"]["water_amount"] == 75_000
        assert "payment_description" in data

    def test_tenant_wrong_pin(self, client):
        response = client.get("/api/tenant/room-4/periods/2024-05", headers={"X-Room-Pin": "0"})

        assert response.status_code == 401

    def test_receipt_upload_and_clear(self, client):
        url = "/api/tenant/room-2/periods/2024-05/receipt"
        client.get("/api/tenant/room-2/periods/2024-05", headers=TENANT)

        uploaded = client.post(url, files={"file": ("bill.png", b"\x89PNG", "image/png")}, headers=TENANT)

        assert uploaded.status_code == 200
        assert uploaded.json()["bill"]["reading"]["receiptImage"] == "data:image/png;base64,iVBORw=="
        receipts = client.get("/api/periods/2024-05/receipts", headers=ADMIN).json()
        assert [r["roomId"] for r in receipts] == ["room-2"]

        cleared = client.delete(url, headers=TENANT)
        assert cleared.json()["bill"]["reading"].get("receiptImage") is None
        assert client.get("/api/periods/2024-05/receipts", headers=ADMIN).json() == []

    def test_clear_receipt_opens_period(self, client):
        response = client.delete("/api/tenant/room-5/periods/2023-02/receipt", headers=TENANT)

        assert response.status_code == 200
        reading = response.json()["bill"]["reading"]
        assert reading["month"] == "2023-02"
        assert reading.get("receiptImage") is None

    def test_receipt_must_be_an_image(self, client):
        response = client.post(
            "/api/tenant/room-2/periods/2024-05/receipt",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=TENANT,
        )

        assert response.status_code == 400


class TestSettingsAndRooms:
    def test_update_rates_applies_to_bills(self, client, store):
        response = client.put("/api/settings", json={"electricity_rate": 4000, "other_fee": 10_000}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["rates"]["electricityRate"] == 4000
        assert store.values["globalElecRate"] == "4000"
        client.put("/api/periods/2024-05/rooms/room-1/meters/electricity", json={"value": 10}, headers=ADMIN)
        bill = _bill(client.get("/api/periods/2024-05/bills", headers=ADMIN).json(), "room-1")
        assert bill["charge"]["total"] == 3_500_000 + 40_000 + 150_000 + 10_000

    def test_change_admin_pin(self, client):
        client.put("/api/settings", json={"admin_pin": "9999"}, headers=ADMIN)

        assert client.get("/api/settings", headers=ADMIN).status_code == 401
        assert client.get("/api/settings", headers={"X-Admin-Pin": "9999"}).status_code == 200

    def test_qr_code_upload(self, client):
        response = client.post(
            "/api/settings/qr-code",
            files={"file": ("qr.png", b"abc", "image/png")},
            headers=ADMIN,
        )

        assert response.json()["payment_qr_code"] == "data:image/png;base64,YWJj"
        tenant = client.get("/api/tenant/room-1/periods/2024-05", headers=TENANT).json()
        assert tenant["payment_qr_code"] == "data:image/png;base64,YWJj"

    def test_add_room_opens_active_period(self, client, store):
        active = client.get("/api/periods/current").json()["period"]
        room = {"id": "room-9", "name": "Phòng 9", "baseRent": 2_000_000, "pin": "9999"}

        response = client.post("/api/rooms", json=room, headers=ADMIN)

        assert response.status_code == 201
        assert "pin" not in response.json()
        stored = json.loads(store.values["readings"])
        assert any(r["roomId"] == "room-9" and r["month"] == active for r in stored)
        assert client.post("/api/rooms", json=room, headers=ADMIN).status_code == 400

    def test_update_room(self, client):
        response = client.put("/api/rooms/room-1", json={"name": "Phòng VIP", "pin": "4321"}, headers=ADMIN)

        assert response.json()["name"] == "Phòng VIP"
        assert client.post("/api/auth/rooms/room-1", json={"pin": "4321"}).status_code == 200
        assert client.put("/api/rooms/room-77", json={"name": "x"}, headers=ADMIN).status_code == 404


@pytest.mark.parametrize("method", ["get", "delete"])
def test_analysis_endpoints_require_admin(client, method):
    assert getattr(client, method)("/api/analysis").status_code == 401
