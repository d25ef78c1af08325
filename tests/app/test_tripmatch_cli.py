from __future__ import annotations

import json
from pathlib import Path
from uuid import UUID, uuid4

import pytest

from tripmatch.domain.errors import NotFoundError
from tripmatch.domain.model import EntityKind, MatchType
from tripmatch.domain.resolution import ResolutionResult
from tripmatch.ui import cli as cli_module


def test_evaluate_passes_arguments(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_evaluate(trip_path: Path, payments_path: Path, **kwargs: object) -> list[object]:
        captured.update(kwargs, trip_path=trip_path, payments_path=payments_path)
        return []

    monkeypatch.setattr(cli_module, "evaluate_files", fake_evaluate)

    cli_module.main(
        [
            "evaluate",
            "--trip",
            "trip.json",
            "--payments",
            "payments.json",
            "--actor",
            "batch",
            "--min-confidence",
            "50",
        ]
    )

    assert captured["trip_path"] == Path("trip.json")
    assert captured["payments_path"] == Path("payments.json")
    assert captured["actor_id"] == "batch"
    assert captured["min_confidence"] == 50
    assert json.loads(capsys.readouterr().out) == []


def test_resolve_prints_result(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def fake_resolve(text: str, kind: EntityKind) -> ResolutionResult:
        return ResolutionResult(
            input_text=text,
            entity_kind=kind,
            resolved_canonical_id="KCGM",
            match_type=MatchType.EXACT,
            score=20.0,
            matched_alias="KCGM FIMISTON",
            confidence_boost=20,
        )

    monkeypatch.setattr(cli_module, "resolve_name", fake_resolve)

    cli_module.main(["resolve", "--kind", "business", "kcgm fimiston"])

    output = json.loads(capsys.readouterr().out)
    assert output["canonical_value"] == "KCGM"
    assert output["entity_kind"] == "business"
    assert output["match_type"] == MatchType.EXACT.value


def test_verify_parses_correlation_id(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    correlation_id = uuid4()

    def fake_verify(correlation_id: UUID, actor_id: str) -> None:
        captured.update(correlation_id=correlation_id, actor_id=actor_id)
        raise NotFoundError("gone")

    monkeypatch.setattr(cli_module, "verify_correlation", fake_verify)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["verify", str(correlation_id), "--actor", "analyst"])

    assert excinfo.value.code == 1
    assert captured == {"correlation_id": correlation_id, "actor_id": "analyst"}


@pytest.mark.parametrize(
    "argv",
    [
        ["verify", "not-a-uuid", "--actor", "analyst"],
        ["evaluate", "--trip", "t.json", "--payments", "p.json", "--min-confidence", "120"],
        ["report", "--days", "-1"],
        ["audit", str(UUID(int=1)), "--limit", "0"],
        ["resolve", "--kind", "vehicle", "X"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2
