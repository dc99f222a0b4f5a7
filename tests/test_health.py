from __future__ import annotations


def test_probes_report_ok(client):
    assert client.get("/v1/healthz").json() == {"status": "ok"}
    assert client.get("/v1/readyz").json() == {"status": "ok"}


def test_store_outage_fails_whole_request(client, fake_server):
    fake_server.connected = False

    response = client.get("/v1/leaderboard")
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "STORE_UNAVAILABLE"

    assert client.get("/v1/readyz").status_code == 503
