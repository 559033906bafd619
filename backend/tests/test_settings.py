from circuitlab.models.settings import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("CIRCUIT_DEFAULT_SCENE", raising=False)
    s = Settings(_env_file=None)
    assert s.CIRCUIT_DEFAULT_SCENE == "switch_bulb.v0"
    assert s.CIRCUIT_MAX_SEARCH_PATHS > 0
    assert s.CIRCUIT_AUDIT_LOG_ENABLED is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CIRCUIT_MAX_SEARCH_PATHS", "50")
    monkeypatch.setenv("CIRCUIT_DEFAULT_SCENE", "battery_box.v0")
    s = Settings(_env_file=None)
    assert s.CIRCUIT_MAX_SEARCH_PATHS == 50
    assert s.CIRCUIT_DEFAULT_SCENE == "battery_box.v0"


def test_cors_origins_expand_localhost():
    s = Settings(
        _env_file=None,
        FRONTEND_ORIGIN="http://localhost",
        CORS_ALLOW_ORIGINS=["https://lessons.example.org/"],
    )
    assert s.CORS_ALLOW_ORIGINS == [
        "https://lessons.example.org",
        "http://localhost:3000",
        "http://localhost",
    ]
