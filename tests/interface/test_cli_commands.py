"""Tests for CLI commands: help, import, review, config."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from cardwise.interface.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def offline(mock_home, monkeypatch):
    monkeypatch.delenv("CARDWISE_OPENAI_API_KEY", raising=False)


@pytest.fixture
def deck_file(tmp_path):
    path = tmp_path / "spanish.yaml"
    path.write_text(
        "deck: spanish\ncards:\n  - {question: Hello, answer: hola}\n", encoding="utf-8"
    )
    return path


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "review" in result.stdout
    assert "import" in result.stdout
    assert "serve" in result.stdout


def test_import_then_review(tmp_path, deck_file):
    db = tmp_path / "cards.db"

    result = runner.invoke(app, ["import", str(deck_file), "--user", "u1", "--database", str(db)])
    assert result.exit_code == 0, result.output
    assert "Imported 1 cards into 'spanish' (0 skipped)" in result.stdout
    card_id = result.stdout.strip().splitlines()[-1]
    assert card_id.startswith("card_")

    result = runner.invoke(app, ["review", card_id, "u1", "HOLA", "--database", str(db)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["validation_method"] == "exact"
    assert payload["fsrs_rating"] == 4
    assert payload["next_review_in_days"] == 4

    # Second review sees the first one's state.
    result = runner.invoke(app, ["review", card_id, "u1", "hola", "--database", str(db)])
    assert json.loads(result.stdout)["next_review_in_days"] == 64


def test_review_unknown_card(tmp_path):
    result = runner.invoke(
        app, ["review", "ghost", "u1", "hola", "--database", str(tmp_path / "cards.db")]
    )
    assert result.exit_code == 1
    assert "Card not found" in result.output


def test_import_invalid_deck(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("cards: [unclosed", encoding="utf-8")

    result = runner.invoke(
        app, ["import", str(path), "--user", "u1", "--database", str(tmp_path / "c.db")]
    )

    assert result.exit_code == 1
    assert "Invalid deck YAML" in result.output


def test_import_tsv_counts_skipped_lines(tmp_path):
    path = tmp_path / "animals.tsv"
    path.write_text("Cat\tgato\nno tab here\n\nDog\tperro\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "import",
            str(path),
            "--user",
            "u1",
            "--deck-id",
            "zoo",
            "--database",
            str(tmp_path / "c.db"),
        ],
    )

    assert result.exit_code == 0, result.output
    lines = result.stdout.strip().splitlines()
    assert lines[0] == "Imported 2 cards into 'zoo' (1 skipped)"
    assert all(line.startswith("card_") for line in lines[1:])
    assert len(lines) == 3


def test_import_rejects_non_utf8(tmp_path):
    path = tmp_path / "latin1.tsv"
    path.write_bytes("Straße\tstreet\n".encode("latin-1"))

    result = runner.invoke(
        app, ["import", str(path), "--user", "u1", "--database", str(tmp_path / "c.db")]
    )

    assert result.exit_code == 1
    assert "UTF-8" in result.output


def test_review_closes_scoring_client(tmp_path):
    from cardwise.application.factory import build_services as real_build

    scorer = MagicMock()
    scorer.close = AsyncMock()

    def build_with_scorer(config):
        services = real_build(config)
        services.scorer = scorer
        return services

    with patch("cardwise.application.factory.build_services", side_effect=build_with_scorer):
        result = runner.invoke(
            app, ["review", "ghost", "u1", "hola", "--database", str(tmp_path / "cards.db")]
        )

    assert result.exit_code == 1
    scorer.close.assert_awaited_once()


def test_config_show(monkeypatch):
    monkeypatch.setenv("CARDWISE_EMBEDDING_THRESHOLD", "0.8")
    monkeypatch.setenv("CARDWISE_OPENAI_API_KEY", "sk-secret")

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["embedding_threshold"] == 0.8
    assert data["openai_api_key"] == "**********"
    assert "sk-secret" not in result.stdout


@patch("uvicorn.run")
def test_serve(mock_run):
    result = runner.invoke(app, ["serve", "--port", "9001"])

    assert result.exit_code == 0
    mock_run.assert_called_once_with("cardwise.server:app", host="127.0.0.1", port=9001)
