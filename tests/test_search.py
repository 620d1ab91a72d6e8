"""
Unit tests for occupation search, details and selection recording
"""

from nco_search.models.audit_log import AuditLog
from nco_search.services.occupation_matcher import (
    OccupationMatcher, KEYWORD_RULES, OCCUPATIONS, MIN_CONFIDENCE, MAX_CONFIDENCE
)

class TestOccupationMatcher:
    """Test cases for the keyword matcher"""

    def test_software_developer(self):
        results = OccupationMatcher().search("software developer")
        assert len(results) == 1
        assert results[0]["nco_code"] == "25120101"
        assert results[0]["title"] == "Software Developer"
        assert 0.925 <= results[0]["confidence"] <= 0.975

    def test_no_match(self):
        assert OccupationMatcher().search("gibberish xyz") == []

    def test_case_insensitive(self):
        results = OccupationMatcher(jitter=lambda: 0).search("Experienced TAILOR")
        assert results[0]["nco_code"] == "75320101"
        assert results[0]["confidence"] == 0.92

    def test_first_matching_rule_wins(self):
        # "sewing" is checked before "driver"
        results = OccupationMatcher().search("sewing machine driver")
        assert [r["nco_code"] for r in results] == ["75320101"]

    def test_each_rule(self):
        queries = {
            "garment stitching": "75320101",
            "python programmer": "25120101",
            "hotel chef": "51210101",
            "college lecturer": "23110101",
            "truck driving": "83210101",
        }
        matcher = OccupationMatcher()
        for query, code in queries.items():
            assert matcher.search(query)[0]["nco_code"] == code

    def test_confidence_is_clamped(self):
        assert OccupationMatcher(jitter=lambda: 1.0).search("software")[0]["confidence"] == MAX_CONFIDENCE
        assert OccupationMatcher(jitter=lambda: -1.0).search("software")[0]["confidence"] == MIN_CONFIDENCE

    def test_rules_reference_known_occupations(self):
        codes = {o["nco_code"] for o in OCCUPATIONS}
        assert all(rule.nco_code in codes for rule in KEYWORD_RULES)

class TestSearchEndpoint:
    """Test cases for POST /api/search"""

    def test_public_search(self, client):
        response = client.post("/api/search", json={"query": "software developer"})
        assert response.status_code == 200

        data = response.json()
        assert data["query"] == "software developer"
        assert data["count"] == 1
        result = data["results"][0]
        assert result["nco_code"] == "25120101"
        assert 0.5 <= result["confidence"] <= 0.99
        assert result["reason"]
        assert len(result["hierarchy"]) == 5

    def test_search_without_match(self, client):
        response = client.post("/api/search", json={"query": "gibberish xyz"})
        assert response.status_code == 200
        assert response.json()["results"] == []
        assert response.json()["count"] == 0

    def test_blank_query(self, client):
        response = client.post("/api/search", json={"query": "   "})
        assert response.status_code == 400

    def test_search_is_audited(self, client, enumerator_headers, db_session):
        client.post("/api/search", json={"query": "cook"})
        client.post("/api/search", json={"query": "driver"}, headers=enumerator_headers)

        actors = [log.actor for log in db_session.query(AuditLog).filter(AuditLog.action == "SEARCH").order_by(AuditLog.id)]
        assert actors == ["Public User", "Test Enumerator"]

    def test_search_with_bad_token(self, client):
        response = client.post(
            "/api/search",
            json={"query": "cook"},
            headers={"Authorization": "Bearer broken"}
        )
        assert response.status_code == 403

class TestOccupationEndpoints:
    """Test cases for occupation listing and details"""

    def test_list_occupations(self, client):
        response = client.get("/api/occupations")
        assert response.status_code == 200
        assert response.json()["count"] == 5

    def test_occupation_details(self, client):
        response = client.get("/api/occupations/51210101")
        assert response.status_code == 200

        data = response.json()
        assert data["title"] == "Cook (General)"
        assert len(data["tasks"]) == 5
        assert data["related_occupations"][0] == {"nco_code": "51210102", "title": "Chef"}

    def test_occupation_not_found(self, client):
        response = client.get("/api/occupations/99999999")
        assert response.status_code == 404
        assert response.json()["error"] == "Occupation not found"

class TestSelections:
    """Test cases for recording selections and overrides"""

    def test_public_cannot_select(self, client):
        response = client.post("/api/selections", json={"nco_code": "25120101", "title": "Software Developer"})
        assert response.status_code == 401

    def test_enumerator_selects(self, client, enumerator_headers, db_session):
        response = client.post(
            "/api/selections",
            json={"nco_code": "25120101", "title": "Software Developer"},
            headers=enumerator_headers
        )
        assert response.status_code == 201

        entry = db_session.query(AuditLog).filter(AuditLog.action == "SELECTION").first()
        assert entry.nco_code == "25120101"
        assert entry.actor == "Test Enumerator"
        assert entry.details == "Selected occupation: 25120101 - Software Developer"

    def test_selection_requires_valid_code(self, client, enumerator_headers):
        response = client.post(
            "/api/selections",
            json={"nco_code": "1234", "title": "Nothing"},
            headers=enumerator_headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "NCO code must be 8 digits"

    def test_enumerator_cannot_override(self, client, enumerator_headers):
        response = client.post(
            "/api/overrides",
            json={"from_code": "25120101", "to_code": "25120102"},
            headers=enumerator_headers
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Operation not permitted"

    def test_admin_overrides(self, client, admin_headers, db_session):
        response = client.post(
            "/api/overrides",
            json={"from_code": "25120101", "to_code": "25120102"},
            headers=admin_headers
        )
        assert response.status_code == 201

        entry = db_session.query(AuditLog).filter(AuditLog.action == "OVERRIDE").first()
        assert entry.details == "Override: Changed from 25120101 to 25120102"

    def test_selection_rejects_non_ascii_code(self, client, enumerator_headers):
        response = client.post(
            "/api/selections",
            json={"nco_code": "٢٥١٢٠١٠١", "title": "Software Developer"},
            headers=enumerator_headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "NCO code must be 8 digits"
