"""Tests for the ``dashboard`` CLI commands.

The command functions are called directly with ``capsys`` capturing their
output. Each test runs inside ``tmp_path`` so the optional default config
location is absent and built-in defaults apply.
"""

from __future__ import annotations

import textwrap
import typing as typ

import msgspec.json as msgspec_json
import pytest

from panda_layout import cli

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def _yaml(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


@pytest.fixture
def modules_file(tmp_path: Path) -> Path:
    return _yaml(
        tmp_path,
        "modules.yaml",
        """
        - kind: greeting
        - {kind: wallet, account_id: 456}
        - {kind: wallet, account_id: 1}
        - kind: disclosures
        """,
    )


def test_plan_text_report(modules_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.plan(modules=modules_file, width="regular")
    out = capsys.readouterr().out
    assert out.startswith("Dashboard layout (regular width)"), f"unexpected: {out!r}"
    assert "[main_wallet_split] split_eligible" in out
    assert "  - wallet-456 (right)" in out, "expected the sentinel wallet on the right"
    assert "  - wallet-1 (left)" in out
    assert "Anomalies" not in out, "expected no anomaly block"


def test_plan_json_on_compact(
    modules_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.plan(modules=modules_file, width="compact", json=True)
    payload = msgspec_json.decode(capsys.readouterr().out)
    assert payload["width"] == "compact"
    assert [s["section"] for s in payload["sections"]] == [
        "header",
        "main_wallet_split",
        "footer",
    ]
    assert {s["layout"] for s in payload["sections"]} == {"full_width"}
    split_items = payload["sections"][1]["items"]
    assert split_items == [
        {"label": "wallet-456", "placement": "none"},
        {"label": "wallet-1", "placement": "none"},
    ], "expected no split placements on compact width"
    assert payload["anomalies"] == []


def test_plan_reports_dropped_modules(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = _yaml(
        tmp_path,
        "dashboard.yaml",
        """
        layout:
          routing:
            regular:
              snapshot: main_wallet_non_split
        """,
    )
    modules = _yaml(tmp_path, "snap.yaml", "- kind: greeting\n- kind: snapshot\n")
    cli.plan(modules=modules, config=config)
    out = capsys.readouterr().out
    assert "main_wallet_non_split" not in out.split("Anomalies:")[0], (
        "expected the unsupported section to be left out"
    )
    assert (
        "! dropped snapshot: section main_wallet_non_split is unsupported "
        "for regular width"
    ) in out


def test_diff_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = _yaml(
        tmp_path,
        "before.yaml",
        "- {kind: wallet, account_id: 456}\n- {kind: wallet, account_id: 1}\n",
    )
    after = _yaml(
        tmp_path,
        "after.yaml",
        "- {kind: wallet, account_id: 1}\n- {kind: wallet, account_id: 456}\n",
    )
    cli.diff(before=before, after=after, json=True)
    payload = msgspec_json.decode(capsys.readouterr().out)
    assert payload["steps"][0]["mutations"] == [
        {
            "op": "MoveItem",
            "module": "wallet-1",
            "from_section": "main_wallet_split",
            "from_index": 1,
            "to_section": "main_wallet_split",
            "to_index": 0,
        }
    ], f"unexpected mutations: {payload!r}"


def test_diff_text(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = _yaml(tmp_path, "before.yaml", "- kind: greeting\n")
    after = _yaml(tmp_path, "after.yaml", "[]\n")
    cli.diff(before=before, after=after)
    out = capsys.readouterr().out
    assert "#1 1 mutation(s)" in out, f"unexpected report: {out!r}"
    assert "  delete section header at 0" in out


def test_replay_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    events = _yaml(
        tmp_path,
        "events.yaml",
        """
        - modules:
            - {kind: greeting}
            - {kind: wallet, account_id: 456}
        - context: compact
        - context: compact
        - modules:
            - {kind: greeting}
            - {kind: snapshot}
            - {kind: wallet, account_id: 456}
        - context: regular
        """,
    )
    cli.replay(events=events, json=True)
    payload = msgspec_json.decode(capsys.readouterr().out)
    steps = payload["steps"]
    assert [step.get("animate") for step in steps] == [False, None, True, None], (
        f"unexpected steps: {steps!r}"
    )
    assert steps[1] == {"invalidate_layout": True}
    assert steps[2]["descriptions"] == [
        "insert section main_wallet_non_split at 1",
        "insert snapshot into main_wallet_non_split at 0",
    ]
    final = {s["section"]: s["layout"] for s in payload["final"]["sections"]}
    assert final["main_wallet_non_split"] == "unsupported", (
        "expected a refresh-only policy to keep the compact partition"
    )


def test_replay_repartitions_when_configured(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = _yaml(
        tmp_path,
        "dashboard.yaml",
        """
        layout:
          routing:
            regular:
              snapshot: main_wallet_split
        presenter:
          context_change: repartition
        """,
    )
    events = _yaml(
        tmp_path,
        "events.yaml",
        """
        - modules:
            - {kind: greeting}
            - {kind: snapshot}
        - context: regular
        """,
    )
    cli.replay(events=events, width="compact", config=config)
    out = capsys.readouterr().out
    assert "#2 animated" in out, f"expected the repartition to be delivered: {out!r}"
    assert "#3 invalidate layout" in out
    assert "Final layout (regular width)" in out
    assert "[main_wallet_split] split_eligible" in out


def test_unknown_width_is_logged(
    modules_file: Path,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    cli.plan(modules=modules_file, width="tv")
    assert "Dashboard layout (unspecified width)" in capsys.readouterr().out
    assert "Unrecognised width 'tv'" in caplog.text
