"""
TEST: REST API
==============

Round trips through the FastAPI app with its TestClient: a good document
comes back as a result document; bad input is a 422, an unstable
structure a 400.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from api.main import app, solve_beam
from beamframe.document import BeamDocument
from beamframe.errors import UnstableStructure


@pytest.fixture
def client():
    return TestClient(app)


def _simple_beam(support_b="roller"):
    return {
        "nodes": [
            {"id": "A", "position": 0, "supportType": "pinned"},
            {"id": "B", "position": 4, "supportType": support_b},
        ],
        "spans": [{"id": "S1", "nodeStartId": "A", "nodeEndId": "B"}],
        "loads": [{"type": "point", "id": "P1", "spanId": "S1", "magnitude": 10, "position": 2}],
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_beam_solve(client):
    response = client.post("/beam/solve", json=_simple_beam())
    assert response.status_code == 200

    body = response.json()
    verticals = {r["node_id"]: r["vertical"] for r in body["reactions"]}
    assert verticals["A"] == pytest.approx(5.0)
    assert verticals["B"] == pytest.approx(5.0)
    assert len(body["moment"]) == 101


def test_beam_with_one_restraint_is_rejected(client):
    response = client.post("/beam/solve", json=_simple_beam(support_b="free"))
    assert response.status_code == 400
    assert "unstable" in response.json()["detail"].lower()


def test_beam_load_outside_span_is_rejected(client):
    doc = _simple_beam()
    doc["loads"][0]["position"] = 9
    response = client.post("/beam/solve", json=doc)
    assert response.status_code == 422


def test_frame_solve(client):
    doc = {
        "isSway": True,
        "nodes": [
            {"id": "N1", "x": 0, "y": 0, "support": "fixed"},
            {"id": "N2", "x": 0, "y": 4},
        ],
        "members": [{"id": "C1", "nodeStartId": "N1", "nodeEndId": "N2", "memberType": "column"}],
        "loads": [{"type": "joint", "id": "H", "nodeId": "N2", "fx": 10}],
    }
    response = client.post("/frame/solve", json=doc)
    assert response.status_code == 200

    body = response.json()
    assert body["reactions"][0]["fx"] == pytest.approx(-10.0)
    assert body["sway_displacement"] > 0


def test_frame_mechanism_is_rejected(client):
    doc = {
        "isSway": True,
        "nodes": [
            {"id": "N1", "x": 0, "y": 0, "support": "pinned"},
            {"id": "N2", "x": 0, "y": 4},
        ],
        "members": [{"id": "C1", "nodeStartId": "N1", "nodeEndId": "N2"}],
        "loads": [{"type": "joint", "id": "H", "nodeId": "N2", "fx": 10}],
    }
    response = client.post("/frame/solve", json=doc)
    assert response.status_code == 400
    assert "singular" in response.json()["detail"].lower()


def test_rejection_keeps_the_solver_error_as_cause():
    """Called directly, the endpoint chains the HTTP error to the solver error."""
    doc = BeamDocument.model_validate(_simple_beam(support_b="free"))
    with pytest.raises(HTTPException) as info:
        solve_beam(doc)

    assert info.value.status_code == 400
    assert isinstance(info.value.__cause__, UnstableStructure)
