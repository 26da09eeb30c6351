"""Tests for the HTTP API."""

import httpx
import pytest
from sqlalchemy.orm import Session

from ccg.api.challenges import get_challenge, get_content_client
from ccg.api.submissions import accept_submission, lower_min_bytes, minimums
from ccg.db import SessionLocal
from ccg.content import ContentClient
from ccg.main import app
from test_content_client import PROBLEMS


def submit(client, challenge_id, handle, code):
    return client.post(f"/challenges/{challenge_id}/submit", json={"handle": handle, "code": code})


def use_site(handler):
    async def override():
        content = ContentClient(base_url="https://example.test", transport=httpx.MockTransport(handler))
        try:
            yield content
        finally:
            await content.aclose()
    app.dependency_overrides[get_content_client] = override


class TestChallenges:
    """Test challenge listing and detail."""
    
    def test_root_and_health(self, client):
        assert client.get("/").json()["name"] == "CCG Arena"
        health = client.get("/health").json()
        assert health["database"] == "connected"
    
    def test_list_registers_builtin_challenges(self, client):
        r = client.get("/challenges")
        assert r.status_code == 200
        assert [(c["id"], c["difficulty"]) for c in r.json()] == [(0, 150), (1, 100)]
    
    def test_search_matches_title_and_description(self, client):
        assert [c["id"] for c in client.get("/challenges?q=FIBONACCI").json()] == [1]
        assert [c["id"] for c in client.get("/challenges?q=diamond").json()] == [0]
        assert [c["id"] for c in client.get("/challenges?q=shortest code").json()] == [0]
        assert client.get("/challenges?q=sudoku").json() == []
        assert len(client.get("/challenges?q=").json()) == 2
    
    def test_detail(self, client):
        r = client.get("/challenges/1")
        assert r.status_code == 200
        body = r.json()
        assert body["title"] == "Fibonacci"
        assert body["min_bytes"] is None
        assert body["examples"][0]["output"] == "5"
    
    def test_examples(self, client):
        r = client.get("/challenges/0/examples")
        assert r.status_code == 200
        assert r.json()[0]["input"] == "3"
    
    def test_unknown_challenge(self, client):
        r = client.get("/challenges/42")
        assert r.status_code == 404
        assert r.json()["detail"]["error_code"] == "NOT_FOUND"
    
    def test_sync_imports_new_challenges(self, client):
        problems = PROBLEMS + [dict(PROBLEMS[1], id=7, title="Primes", difficulty=120)]
        use_site(lambda request: httpx.Response(200, json=problems))
        
        client.get("/challenges")
        r = client.post("/challenges/sync")
        assert r.status_code == 200
        assert r.json() == {"fetched": 3, "created": [7], "skipped": [0, 1]}
        
        assert client.get("/challenges/7").json()["difficulty"] == 120
        # Published challenges are not rewritten
        assert client.get("/challenges/0").json()["title"] == "Print a Diamond"
    
    def test_sync_with_site_down(self, client):
        use_site(lambda request: httpx.Response(500))
        r = client.post("/challenges/sync")
        assert r.status_code == 502
        assert r.json()["detail"]["error_code"] == "CONTENT_UNAVAILABLE"
    
    def test_detail_page(self, client):
        use_site(lambda request: httpx.Response(200, text="<p>diamond</p>"))
        r = client.get("/challenges/0/detail")
        assert r.status_code == 200
        assert r.text == "<p>diamond</p>"
        assert r.headers["content-type"].startswith("text/html")
    
    def test_detail_page_missing(self, client):
        use_site(lambda request: httpx.Response(404))
        r = client.get("/challenges/0/detail")
        assert r.status_code == 404
        assert r.json()["detail"]["error_code"] == "DETAIL_UNAVAILABLE"


class TestEstimate:
    """Test the score preview."""
    
    def test_estimate_without_submissions(self, client):
        r = client.post("/challenges/0/estimate", json={"code": "x" * 120})
        assert r.status_code == 200
        assert r.json() == {
            "challenge_id": 0,
            "byte_count": 120,
            "min_bytes": 120,
            "score": 150,
            "difficulty": 150,
        }
    
    def test_estimate_against_minimum(self, client):
        submit(client, 1, "CodeMaster", "x" * 45)
        r = client.post("/challenges/1/estimate", json={"code": "y" * 52})
        assert r.json()["score"] == 87
        # Estimating does not record anything
        assert client.get("/challenges/1/leaderboard").json()["total_submissions"] == 1
    
    def test_estimate_counts_utf8_bytes(self, client):
        r = client.post("/challenges/0/estimate", json={"code": "é"})
        assert r.json()["byte_count"] == 2
    
    def test_estimate_empty_code(self, client):
        r = client.post("/challenges/0/estimate", json={"code": ""})
        assert r.status_code == 400
        assert r.json()["detail"]["error_code"] == "INVALID_INPUT"
        assert r.json()["detail"]["field"] == "code"


class TestSubmissions:
    """Test submitting and ranking."""
    
    def test_first_submission_earns_difficulty(self, client):
        r = submit(client, 0, "CodeMaster", "x" * 100)
        assert r.status_code == 200
        body = r.json()
        assert body["byte_count"] == 100
        assert body["score"] == 150
        assert body["rank"] == 1
        assert client.get("/challenges/0").json()["min_bytes"] == 100
    
    def test_longer_submission_scores_less(self, client):
        submit(client, 0, "CodeMaster", "x" * 100)
        body = submit(client, 0, "SwiftNinja", "x" * 150).json()
        assert body["score"] == 100
        assert body["min_bytes_at_submission"] == 100
        assert body["rank"] == 2
    
    def test_earlier_scores_not_recomputed(self, client):
        first = submit(client, 0, "CodeMaster", "x" * 100).json()
        submit(client, 0, "SwiftNinja", "x" * 50)
        
        again = client.get(f"/challenges/submissions/{first['id']}").json()
        assert again["score"] == 150
        assert client.get("/challenges/0").json()["min_bytes"] == 50
    
    def test_handle_is_trimmed(self, client):
        body = submit(client, 0, "  golfer  ", "x").json()
        assert body["handle"] == "golfer"
    
    def test_empty_handle(self, client):
        r = submit(client, 0, "   ", "x" * 10)
        assert r.status_code == 400
        assert r.json()["detail"]["error_code"] == "INVALID_INPUT"
        assert r.json()["detail"]["field"] == "handle"
    
    def test_empty_code(self, client):
        r = submit(client, 0, "golfer", "")
        assert r.status_code == 400
        assert r.json()["detail"]["field"] == "code"
    
    def test_unknown_challenge(self, client):
        assert submit(client, 42, "golfer", "x").status_code == 404
    
    def test_code_too_large(self, client, monkeypatch):
        monkeypatch.setattr("ccg.api.submissions.MAX_CODE_BYTES", 10)
        r = submit(client, 0, "golfer", "x" * 11)
        assert r.status_code == 413
        assert r.json()["detail"]["error_code"] == "CODE_TOO_LARGE"
    
    def test_rate_limit(self, client, monkeypatch):
        monkeypatch.setattr("ccg.api.submissions.SUBMISSIONS_PER_HOUR", 2)
        assert submit(client, 0, "golfer", "x" * 10).status_code == 200
        assert submit(client, 0, "golfer", "x" * 9).status_code == 200
        r = submit(client, 0, "golfer", "x" * 8)
        assert r.status_code == 429
        assert r.json()["detail"]["error_code"] == "RATE_LIMITED"
        # Other challenges are counted separately
        assert submit(client, 1, "golfer", "x" * 8).status_code == 200
    
    def test_missing_submission(self, client):
        r = client.get("/challenges/submissions/does-not-exist")
        assert r.status_code == 404


class TestLeaderboards:
    """Test challenge leaderboards, the ladder and handle views."""
    
    def test_challenge_leaderboard(self, client):
        submit(client, 0, "CodeMaster", "x" * 45)
        submit(client, 0, "SwiftNinja", "x" * 48)
        submit(client, 0, "CGolfPro", "x" * 52)
        submit(client, 0, "SwiftNinja", "x" * 60)
        
        board = client.get("/challenges/0/leaderboard").json()
        assert board["min_bytes"] == 45
        assert board["total_submissions"] == 4
        assert board["unique_handles"] == 3
        assert [(e["rank"], e["handle"], e["byte_count"], e["score"]) for e in board["entries"]] == [
            (1, "CodeMaster", 45, 150),
            (2, "SwiftNinja", 48, 141),
            (3, "CGolfPro", 52, 130),
        ]
    
    def test_leaderboard_limit_and_repeatability(self, client):
        for i, handle in enumerate(["a", "b", "c"]):
            submit(client, 0, handle, "x" * (40 + i))
        
        first = client.get("/challenges/0/leaderboard?limit=2").json()
        second = client.get("/challenges/0/leaderboard?limit=2").json()
        assert [e["handle"] for e in first["entries"]] == ["a", "b"]
        assert first == second
    
    def test_empty_leaderboard(self, client):
        board = client.get("/challenges/1/leaderboard").json()
        assert board["entries"] == []
        assert board["min_bytes"] is None
    
    def test_ladder(self, client):
        submit(client, 0, "alice", "x" * 100)   # 150
        submit(client, 1, "alice", "x" * 100)   # 100
        submit(client, 0, "bob", "x" * 200)     # 75
        submit(client, 1, "bob", "x" * 50)      # 100
        
        ladder = client.get("/ladder").json()
        assert [(e["rank"], e["handle"], e["total_score"], e["solved_count"]) for e in ladder] == [
            (1, "alice", 250, 2),
            (2, "bob", 175, 2),
        ]
    
    def test_empty_ladder(self, client):
        assert client.get("/ladder").json() == []
    
    def test_handle_info(self, client):
        submit(client, 0, "alice", "x" * 100)
        submit(client, 0, "alice", "x" * 200)
        submit(client, 1, "alice", "x" * 30)
        submit(client, 0, "bob", "x" * 90)
        
        info = client.get("/handles/alice").json()
        assert info["submission_count"] == 3
        assert info["best_scores"] == {"0": 150, "1": 100}
        assert info["total_score"] == 250
        assert info["solved_count"] == 2
        assert info["ladder_rank"] == 1
        
        bob = client.get("/handles/bob").json()
        assert (bob["total_score"], bob["solved_count"], bob["ladder_rank"]) == (150, 1, 2)
    
    def test_unknown_handle(self, client):
        assert client.get("/handles/nobody").status_code == 404
    
    def test_handle_submissions(self, client):
        submit(client, 0, "alice", "x" * 100)
        submit(client, 1, "alice", "x" * 30)
        
        history = client.get("/handles/alice/submissions").json()
        assert len(history) == 2
        only_fib = client.get("/handles/alice/submissions?challenge_id=1").json()
        assert [s["challenge_id"] for s in only_fib] == [1]


class TestMinimumPersistence:
    """The running minimum only reflects committed submissions."""
    
    def test_failed_commit_leaves_minimum_alone(self, client, monkeypatch):
        submit(client, 0, "first", "x" * 100)
        
        def fail_commit(self):
            raise RuntimeError("disk full")
        
        db = SessionLocal()
        try:
            challenge = get_challenge(db, 0)
            monkeypatch.setattr(Session, "commit", fail_commit)
            with pytest.raises(RuntimeError):
                accept_submission(db, challenge, "short", "x" * 10)
            monkeypatch.undo()
        finally:
            db.close()
        
        assert minimums.get(0) == 100
        assert client.get("/challenges/0").json()["min_bytes"] == 100
        body = submit(client, 0, "again", "x" * 100).json()
        assert body["score"] == 150
        assert body["min_bytes_at_submission"] == 100
        assert client.get("/challenges/0/leaderboard").json()["total_submissions"] == 2
    
    def test_stale_row_cannot_raise_minimum(self, client):
        """A writer holding an old row still scores against the stored minimum."""
        submit(client, 0, "a", "x" * 100)
        
        db = SessionLocal()
        try:
            stale = get_challenge(db, 0)
            assert stale.min_bytes == 100
            
            submit(client, 0, "b", "x" * 80)
            minimums.reset()  # as if in a separate process
            
            accepted = accept_submission(db, stale, "c", "x" * 90)
            assert accepted.min_bytes_at_submission == 80
            assert accepted.score == 133
        finally:
            db.close()
        
        assert client.get("/challenges/0").json()["min_bytes"] == 80
        assert minimums.get(0) == 80
    
    def test_conditional_update_never_raises_minimum(self, client):
        submit(client, 0, "a", "x" * 80)
        
        db = SessionLocal()
        try:
            lower_min_bytes(db, 0, 120)
            db.commit()
            lower_min_bytes(db, 0, 60)
            db.commit()
        finally:
            db.close()
        
        assert client.get("/challenges/0").json()["min_bytes"] == 60
