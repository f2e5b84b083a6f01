"""Mini README: Tests for environment-driven settings."""

from __future__ import annotations

from wealthtracker.configuration import WealthTrackerSettings


def test_defaults_match_sync_contract(tmp_path) -> None:
    settings = WealthTrackerSettings(data_directory=tmp_path)

    assert settings.sync_ttl_seconds == 3600
    assert settings.interface_port == 3000
    assert settings.ledger_path == tmp_path.resolve() / "income_data.json"


def test_environment_variables_override_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("WEALTHTRACKER_SYNC_TTL_SECONDS", "120")
    monkeypatch.setenv("WEALTHTRACKER_DATA_DIRECTORY", str(tmp_path / "ledger"))
    monkeypatch.setenv("WEALTHTRACKER_LEDGER_FILENAME", "takings.json")

    settings = WealthTrackerSettings()

    assert settings.sync_ttl_seconds == 120
    assert settings.data_directory.is_dir()
    assert settings.ledger_path.name == "takings.json"
