"""
API tests for /match, /match/select, /verify and /report.

Candidate lookup is replaced through FastAPI dependency overrides, so no
request leaves the process.
"""

import pytest
from fastapi.testclient import TestClient

from cv_checker.api.routes.match import get_candidate_search
from cv_checker.core.crossref import CandidateEntry, CandidateRetrievalError
from cv_checker.main import app

client = TestClient(app)


def _exact_search(record):
    return [
        CandidateEntry(
            title=record.title,
            authors=["John A Smith", "Robert K Doe"],
            venue="Journal of Medicine",
            year=record.year,
            external_id="10.1000/jmed.2020.1",
        ),
        CandidateEntry(title="Unrelated cardiology trial", venue="Heart", year=2001, external_id="10.1000/heart"),
    ]


def _ambiguous_search(record):
    return [
        CandidateEntry(title=record.title, authors=["Robert K Doe", "John A Smith"], external_id="10.1/a"),
        CandidateEntry(title=record.title, authors=["John A Smith", "Robert K Doe"], external_id="10.1/b"),
    ]


def _failing_search(record):
    raise CandidateRetrievalError("Crossref request failed after 3 attempts")


@pytest.fixture
def use_search():
    def _use(search):
        app.dependency_overrides[get_candidate_search] = lambda: search
    yield _use
    app.dependency_overrides.pop(get_candidate_search, None)


@pytest.fixture
def parsed(eras_cv_text):
    r = client.post("/parse/text", json={"text": eras_cv_text})
    assert r.status_code == 200
    return r.json()["publications"]


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_match_auto_selects(use_search, parsed):
    use_search(_exact_search)
    r = client.post("/match", json={"publications": parsed})
    assert r.status_code == 200
    data = r.json()

    assert data["errors"] == {}
    assert [p["id"] for p in data["publications"]] == [p["id"] for p in parsed]
    match = data["publications"][0]["match"]
    assert match["auto_selected"] is True
    assert match["selected_id"] == match["candidates"][0]["id"]
    assert match["candidates"][0]["external_id"] == "10.1000/jmed.2020.1"
    assert match["candidates"][0]["source_name"] == "Crossref"


def test_match_reports_lookup_failures(use_search, parsed):
    use_search(_failing_search)
    r = client.post("/match", json={"publications": parsed})
    assert r.status_code == 200
    data = r.json()

    assert set(data["errors"]) == {p["id"] for p in parsed}
    assert all(p["match"]["candidates"] == [] for p in data["publications"])


def test_manual_selection_then_verify(use_search, parsed):
    use_search(_ambiguous_search)
    matched = client.post("/match", json={"publications": parsed[:1]}).json()["publications"]
    record = matched[0]
    assert record["match"]["selected_id"] is None

    # Unselected records count as unmatched
    r = client.post("/verify", json={"publications": [record]})
    assert r.json()["summary"]["unmatched"] == 1

    second = record["match"]["candidates"][1]
    r = client.post("/match/select", json={"publication": record, "candidate_id": second["id"]})
    assert r.status_code == 200
    selected = r.json()
    assert selected["id"] == record["id"]
    assert selected["match"]["selected_id"] == second["id"]
    assert selected["match"]["auto_selected"] is False

    r = client.post("/verify", json={"publications": [selected]})
    assert r.status_code == 200
    data = r.json()
    assert second["external_id"] == "10.1/b"
    assert data["results"][0]["publication_id"] == record["id"]
    assert data["results"][0]["verdict"]["status"] == "good"
    assert data["summary"]["total"] == 1


def test_select_unknown_candidate_is_404(use_search, parsed):
    use_search(_exact_search)
    record = client.post("/match", json={"publications": parsed[:1]}).json()["publications"][0]
    r = client.post("/match/select", json={"publication": record, "candidate_id": "missing"})
    assert r.status_code == 404


def test_select_without_match_state_is_404(parsed):
    r = client.post("/match/select", json={"publication": parsed[0], "candidate_id": "anything"})
    assert r.status_code == 404


def test_verify_owner_policy(use_search, parsed):
    use_search(_exact_search)
    matched = client.post("/match", json={"publications": parsed[:1]}).json()["publications"]
    payload = {
        "publications": matched,
        "policy": "owner_position",
        "owner": {"full_name": "Robert K Doe", "variants": ["Doe RK"]},
    }
    r = client.post("/verify", json=payload)
    assert r.status_code == 200
    assert r.json()["results"][0]["verdict"]["explanation"] == "Authorship and position align."


def test_verify_owner_policy_requires_owner(parsed):
    r = client.post("/verify", json={"publications": parsed, "policy": "owner_position"})
    assert r.status_code == 422


def test_report_csv(use_search, parsed):
    use_search(_exact_search)
    matched = client.post("/match", json={"publications": parsed}).json()["publications"]
    r = client.post("/report", json={"publications": matched})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert "attachment" in r.headers["content-disposition"]
    lines = r.text.strip().split("\n")
    assert lines[0].startswith("Section,Type,Title")
    assert len(lines) == 3


def test_report_html(parsed):
    r = client.post("/report?format=html", json={"publications": parsed})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "A Study of Things" in r.text


def test_report_rejects_unknown_format(parsed):
    r = client.post("/report?format=xml", json={"publications": parsed})
    assert r.status_code == 422
