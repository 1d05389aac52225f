from __future__ import annotations

import pytest

from siptrack.domain.model import ChangeRequestState, SourceKind, Status
from siptrack.domain.status import (
    StatusSignals,
    friendly_label,
    mentions_withdrawal,
    parse_status,
    promote_if_merged,
    resolve_status,
    status_rank,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("final", Status.FINAL),
        ("  Live ", Status.LIVE),
        ("draft (no file)", Status.DRAFT_NO_FILE),
        ("Closed-Unmerged", Status.CLOSED_UNMERGED),
        ("shipped", None),
        (3, None),
    ],
)
def test_parse_status(value: object, expected: Status | None) -> None:
    assert parse_status(value) is expected


def test_explicit_status_wins() -> None:
    signals = StatusSignals(source_kind=SourceKind.ACCEPTED_FOLDER, explicit="Live")

    assert resolve_status(signals) is Status.LIVE


def test_invalid_explicit_status_falls_back_to_folder_default() -> None:
    accepted = StatusSignals(source_kind=SourceKind.ACCEPTED_FOLDER, explicit="shipping soon")
    withdrawn = StatusSignals(source_kind=SourceKind.WITHDRAWN_FOLDER)

    assert resolve_status(accepted) is Status.FINAL
    assert resolve_status(withdrawn) is Status.WITHDRAWN


@pytest.mark.parametrize(
    ("kind", "state", "merged", "withdrawal", "expected"),
    [
        (SourceKind.CHANGE_REQUEST_DOCUMENT, ChangeRequestState.CLOSED, True, False, Status.ACCEPTED),
        (SourceKind.CHANGE_REQUEST_DOCUMENT, ChangeRequestState.CLOSED, False, True, Status.WITHDRAWN),
        (
            SourceKind.CHANGE_REQUEST_PLACEHOLDER,
            ChangeRequestState.CLOSED,
            False,
            False,
            Status.CLOSED_UNMERGED,
        ),
        (SourceKind.CHANGE_REQUEST_DOCUMENT, ChangeRequestState.OPEN, False, False, Status.DRAFT),
        (
            SourceKind.CHANGE_REQUEST_PLACEHOLDER,
            ChangeRequestState.OPEN,
            False,
            False,
            Status.DRAFT_NO_FILE,
        ),
    ],
)
def test_change_request_status(
    kind: SourceKind,
    state: ChangeRequestState,
    merged: bool,
    withdrawal: bool,
    expected: Status,
) -> None:
    signals = StatusSignals(
        source_kind=kind,
        change_request_state=state,
        merged=merged,
        withdrawal_mentioned=withdrawal,
    )

    assert resolve_status(signals) is expected


def test_withdrawal_keyword_is_word_bounded() -> None:
    assert mentions_withdrawal("Withdraw SIP-9")
    assert mentions_withdrawal(None, "This proposal was WITHDRAWN by its author")
    assert mentions_withdrawal("Proposal withdrawal")
    assert not mentions_withdrawal("Add withdrawable balances")
    assert not mentions_withdrawal(None, "")


def test_promotion_only_lifts_drafts() -> None:
    assert promote_if_merged(Status.DRAFT, merged=True) is Status.ACCEPTED
    assert promote_if_merged(Status.DRAFT_NO_FILE, merged=True) is Status.ACCEPTED
    assert promote_if_merged(Status.DRAFT, merged=False) is Status.DRAFT
    assert promote_if_merged(Status.FINAL, merged=True) is Status.FINAL
    assert promote_if_merged(Status.WITHDRAWN, merged=True) is Status.WITHDRAWN


def test_status_rank_order() -> None:
    ordered = sorted(Status, key=status_rank)

    assert ordered[0] is Status.LIVE
    assert ordered[-1] is Status.ARCHIVED
    assert ordered.index(Status.DRAFT_NO_FILE) < ordered.index(Status.CLOSED_UNMERGED)


def test_friendly_labels() -> None:
    assert friendly_label(Status.FINAL) == "Approved"
    assert friendly_label(Status.DRAFT) == "In Progress"
    assert friendly_label(Status.DRAFT_NO_FILE) == "Draft Started"
    assert friendly_label(Status.CLOSED_UNMERGED) == "Rejected"
    assert friendly_label(Status.WITHDRAWN) == "Withdrawn"
