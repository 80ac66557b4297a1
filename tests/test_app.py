"""Tests for the Flask dashboard and JSON API."""
import pytest

from app import create_app
from state import Device, MachineKind, MachineStatus

from tests.conftest import T0


@pytest.fixture
def client(laundry):
    app = create_app(laundry, poll_sec=1)
    app.config["TESTING"] = True
    return app.test_client()


class TestApi:
    def test_list_machines(self, client):
        res = client.get("/api/machines")
        assert res.status_code == 200
        data = res.get_json()
        assert [d["name"] for d in data] == ["Washer 1", "Washer 2", "Dryer 1", "Dryer 2"]
        assert all(d["status"] == "available" for d in data)

    def test_press_starts_machine(self, client):
        res = client.post("/api/machines/washer/2/press")
        assert res.status_code == 200
        data = res.get_json()
        assert data["status"] == "running"
        assert data["end_ts"] == T0 + 90 * 60
        assert data["time_left"] == "1h 30m left"

    def test_get_machine(self, client, fake_time):
        client.post("/api/machines/dryer/1/press")
        fake_time.advance(120 * 60 - 45)
        data = client.get("/api/machines/dryer/1").get_json()
        assert data["status"] == "running"
        assert data["time_left"] == "45s left"

    def test_unknown_machine_is_404(self, client):
        assert client.get("/api/machines/washer/9").status_code == 404
        assert client.post("/api/machines/oven/1/press").status_code == 404

    def test_clock_error_is_503(self, client, laundry, fake_time):
        fake_time.fail = OSError("no time")
        res = client.post("/api/machines/washer/1/press")
        assert res.status_code == 503
        assert res.get_json()["error"] == "clock unavailable"
        st = laundry.current_state(Device(MachineKind.WASHER, 1))
        assert st.status == MachineStatus.AVAILABLE


class TestDashboard:
    def test_dashboard_polls_partial(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert b"/partial/machines" in res.data
        assert b"every 1s" in res.data

    def test_partial_shows_states(self, client):
        client.post("/api/machines/washer/1/press")
        html = client.get("/partial/machines").get_data(as_text=True)
        assert "Washer 1" in html
        assert "1h 30m left" in html
        assert "Available" in html

    def test_form_press_redirects(self, client, laundry):
        res = client.post("/machines/dryer/2/press")
        assert res.status_code == 302
        st = laundry.current_state(Device(MachineKind.DRYER, 2))
        assert st.status == MachineStatus.RUNNING
