from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient


def _serve_from(monkeypatch: pytest.MonkeyPatch, directory: Path) -> None:
    import main

    monkeypatch.setattr(main.frontend_files, "directory", str(directory))
    monkeypatch.setattr(main.frontend_files, "all_directories", [str(directory)])


@pytest.fixture
def public_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<html>money mind" + " " * 2000 + "</html>", encoding="utf-8")
    (root / "app.js").write_text("console.log('hi');", encoding="utf-8")
    _serve_from(monkeypatch, root)
    return root


def test_health(client: TestClient) -> None:
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "service": "Money Mind"}


def test_static_file_is_served(client: TestClient, public_dir: Path) -> None:
    r = client.get("/app.js")
    assert r.status_code == 200
    assert "console.log" in r.text


def test_unknown_path_falls_back_to_index(client: TestClient, public_dir: Path) -> None:
    r = client.get("/dashboard/settings")
    assert r.status_code == 200
    assert "money mind" in r.text


def test_root_serves_index(client: TestClient, public_dir: Path) -> None:
    r = client.get("/")
    assert r.status_code == 200
    assert "money mind" in r.text


def test_unknown_api_path_is_json_404(client: TestClient, public_dir: Path) -> None:
    r = client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"error": "not_found"}


@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
def test_unknown_api_path_is_404_for_every_method(client: TestClient, public_dir: Path, method: str) -> None:
    r = client.request(method, "/api/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"error": "not_found"}


def test_missing_index_is_404(client: TestClient, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    _serve_from(monkeypatch, empty)
    r = client.get("/anything")
    assert r.status_code == 404
    assert r.json() == {"error": "not_found"}


def test_path_traversal_does_not_escape_public_dir(client: TestClient, public_dir: Path) -> None:
    secret = public_dir.parent / "secret.txt"
    secret.write_text("top secret", encoding="utf-8")
    r = client.get("/..%2Fsecret.txt")
    assert "top secret" not in r.text


def test_large_responses_are_gzipped(client: TestClient, public_dir: Path) -> None:
    r = client.get("/", headers={"Accept-Encoding": "gzip"})
    assert r.status_code == 200
    assert r.headers["content-encoding"] == "gzip"
    assert "money mind" in r.text


def test_cors_header_on_api_responses(client: TestClient) -> None:
    r = client.get("/api/health", headers={"Origin": "https://app.example.com"})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
