from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from siptrack.domain.model import SourceKind, Status
from siptrack.ui import cli as cli_module
from tests.helpers.proposals import at, make_record

if TYPE_CHECKING:
    from siptrack.domain.model import ProposalRecord


class FakeEngine:
    def __init__(self, *records: ProposalRecord) -> None:
        self.records = list(records)
        self.calls: list[tuple[str, object, bool]] = []

    def list_all(self, force_refresh: bool = False) -> list[ProposalRecord]:  # noqa: FBT001, FBT002
        self.calls.append(("list", None, force_refresh))
        return list(self.records)

    def get_by_id(
        self,
        proposal_id: str,
        force_refresh: bool = False,  # noqa: FBT001, FBT002
    ) -> ProposalRecord | None:
        self.calls.append(("show", proposal_id, force_refresh))
        wanted = proposal_id.lower()
        return next((record for record in self.records if record.id == wanted), None)


RECORDS = (
    make_record("sip-012", title="Faster checkpoints", status=Status.LIVE, updated_at=at(3)),
    make_record(
        "sip-005",
        title="Brand new idea",
        status=Status.DRAFT_NO_FILE,
        source_kind=SourceKind.CHANGE_REQUEST_PLACEHOLDER,
        body=None,
        change_request_number=5,
    ),
)


def _run(argv: list[str], engine: FakeEngine) -> int:
    return cli_module.run(cli_module._parse_args(argv), engine)  # type: ignore[arg-type]  # noqa: SLF001


def test_list_prints_one_row_per_record(capsys: pytest.CaptureFixture[str]) -> None:
    engine = FakeEngine(*RECORDS)

    assert _run(["list"], engine) == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("sip-012")
    assert "Faster checkpoints" in lines[0]
    assert engine.calls == [("list", None, False)]


def test_list_json(capsys: pytest.CaptureFixture[str]) -> None:
    engine = FakeEngine(*RECORDS)

    assert _run(["list", "--json", "--refresh"], engine) == 0

    payload = json.loads(capsys.readouterr().out)
    assert [item["id"] for item in payload] == ["sip-012", "sip-005"]
    assert payload[0]["status"] == "Live"
    assert payload[0]["updated_at"] == at(3).isoformat()
    assert payload[1]["source_kind"] == "change_request_placeholder"
    assert payload[1]["sources"] == ["change_request_placeholder"]
    assert engine.calls == [("list", None, True)]


def test_show_detail(capsys: pytest.CaptureFixture[str]) -> None:
    engine = FakeEngine(*RECORDS)

    assert _run(["show", "SIP-012"], engine) == 0

    output = capsys.readouterr().out
    assert output.startswith("sip-012: Faster checkpoints")
    assert "Status:   Live" in output


def test_show_unknown_returns_error_code(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["show", "sip-999"], FakeEngine(*RECORDS)) == 1
    assert capsys.readouterr().out == ""


def test_main_exits_with_run_result(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "build_engine", lambda: FakeEngine(*RECORDS))

    with pytest.raises(SystemExit) as exc:
        cli_module.main(["show", "sip-404"])

    assert exc.value.code == 1


def test_main_reports_fatal_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_engine() -> FakeEngine:
        raise RuntimeError("no network")

    monkeypatch.setattr(cli_module, "build_engine", broken_engine)

    with pytest.raises(SystemExit) as exc:
        cli_module.main(["list"])

    assert exc.value.code == 1


def test_missing_command_is_rejected() -> None:
    with pytest.raises(SystemExit):
        cli_module.main([])
