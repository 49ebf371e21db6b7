from __future__ import annotations

import json

import pytest


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    """Isolate the CLI from local .env files and settings."""
    monkeypatch.chdir(tmp_path)
    for var in ("ADMIN_SECRET", "BOARD_TEMPLATE_PATH", "LOG_LEVEL", "TRACKER_DB_PATH"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def db(tmp_path) -> str:
    return str(tmp_path / "cli.db")


def run(capsys, *args: str) -> tuple[int, str, str]:
    from src.__main__ import main

    exit_code = main(list(args))
    captured = capsys.readouterr()
    return exit_code, captured.out, captured.err


def seed(capsys, db: str, owner: str = "user_1") -> dict[str, list[str]]:
    exit_code, out, _ = run(capsys, "columns", "seed", "--owner", owner, "--db", db)
    assert exit_code == 0
    return json.loads(out)


def test_cli_no_mode_prints_help(capsys) -> None:
    exit_code, out, _ = run(capsys)

    assert exit_code == 0
    assert "columns" in out


def test_cli_columns_seed_and_list(capsys, db) -> None:
    seeded = seed(capsys, db)
    assert len(seeded["application"]) == 5
    assert len(seeded["study"]) == 7

    exit_code, out, _ = run(
        capsys, "columns", "list", "--owner", "user_1", "--kind", "study", "--db", db
    )

    assert exit_code == 0
    columns = json.loads(out)
    assert [c["name"] for c in columns][:2] == ["Sunday", "Monday"]
    assert [c["order"] for c in columns] == list(range(7))


def test_cli_columns_move(capsys, db) -> None:
    seeded = seed(capsys, db)

    exit_code, out, _ = run(
        capsys,
        "columns", "move",
        "--owner", "user_1",
        "--id", seeded["application"][0],
        "--to", "2",
        "--db", db,
    )

    assert exit_code == 0
    names = [c["name"] for c in json.loads(out)]
    assert names == ["Follow-up", "Interview", "Applied", "Offer", "Rejected"]


def test_cli_delete_default_column_fails_cleanly(capsys, db) -> None:
    seeded = seed(capsys, db)

    exit_code, _, err = run(
        capsys, "columns", "delete", "--id", seeded["application"][0], "--db", db
    )

    assert exit_code == 1
    assert "Cannot delete default status" in err


def test_cli_items_add_move_and_counts(capsys, db) -> None:
    seeded = seed(capsys, db)
    applied, interview = seeded["application"][0], seeded["application"][2]

    exit_code, out, _ = run(
        capsys,
        "items", "add-application",
        "--owner", "user_1",
        "--status", applied,
        "--company", "Acme",
        "--position", "Engineer",
        "--date-applied", "2024-01-15",
        "--db", db,
    )
    assert exit_code == 0
    item_id = out.strip()

    exit_code, _, _ = run(
        capsys, "items", "move", "--id", item_id, "--status", interview, "--db", db
    )
    assert exit_code == 0

    exit_code, out, _ = run(capsys, "items", "counts", "--owner", "user_1", "--db", db)
    assert exit_code == 0
    assert json.loads(out) == {interview: 1}


def test_cli_add_problem_and_reorder(capsys, db) -> None:
    seeded = seed(capsys, db)
    monday = seeded["study"][1]

    ids = []
    for title in ("Two Sum", "LRU Cache"):
        exit_code, out, _ = run(
            capsys,
            "items", "add-problem",
            "--owner", "user_1",
            "--status", monday,
            "--day", "1",
            "--title", title,
            "--score", "3",
            "--db", db,
        )
        assert exit_code == 0
        ids.append(out.strip())

    exit_code, _, _ = run(
        capsys,
        "items", "reorder",
        "--kind", "study",
        "--ids", ",".join(ids),
        "--order", "0,1",
        "--db", db,
    )
    assert exit_code == 0

    exit_code, out, _ = run(
        capsys, "items", "list", "--owner", "user_1", "--kind", "study", "--db", db
    )
    assert [p["title"] for p in json.loads(out)] == ["Two Sum", "LRU Cache"]


def test_cli_partial_reorder_fails_cleanly(capsys, db) -> None:
    seeded = seed(capsys, db)
    applied = seeded["application"][0]
    ids = []
    for company in ("Acme", "Globex"):
        _, out, _ = run(
            capsys,
            "items", "add-application",
            "--owner", "user_1",
            "--status", applied,
            "--company", company,
            "--position", "SWE",
            "--date-applied", "2024-01-15",
            "--db", db,
        )
        ids.append(out.strip())

    exit_code, _, err = run(
        capsys, "items", "reorder", "--ids", ids[0], "--order", "0", "--db", db
    )

    assert exit_code == 1
    assert "every item" in err


def test_cli_invalid_day_rejected_by_parser() -> None:
    from src.__main__ import create_parser

    parser = create_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(
            ["items", "add-problem", "--owner", "u", "--status", "s", "--day", "9",
             "--title", "t", "--score", "3"]
        )


def test_cli_activity_and_leaderboard(capsys, db, tmp_path) -> None:
    seeded = seed(capsys, db)
    run(
        capsys,
        "items", "add-application",
        "--owner", "user_1",
        "--status", seeded["application"][0],
        "--company", "Acme",
        "--position", "Engineer",
        "--date-applied", "2024-01-15",
        "--db", db,
    )
    _, out, _ = run(
        capsys, "network", "add-company", "--owner", "user_1", "--name", "Initech", "--db", db
    )
    company_id = out.strip()
    exit_code, _, _ = run(
        capsys,
        "network", "add-referral",
        "--owner", "user_1",
        "--company-id", company_id,
        "--name", "Peter Gibbons",
        "--final",
        "--db", db,
    )
    assert exit_code == 0

    exit_code, out, _ = run(capsys, "activity", "--owner", "user_1", "--db", db)
    assert exit_code == 0
    events = json.loads(out)
    assert {e["type"] for e in events} == {"application", "referral"}
    assert {e["action"] for e in events} == {"Applied to", "Successfully referred at"}

    names = tmp_path / "names.json"
    names.write_text(json.dumps({"user_1": "Sam"}), encoding="utf-8")
    exit_code, out, _ = run(capsys, "leaderboard", "--names", str(names), "--db", db)
    assert exit_code == 0
    assert json.loads(out) == [{"user_id": "user_1", "display_name": "Sam", "score": 1}]

    exit_code, out, _ = run(capsys, "leaderboard", "--applications", "--db", db)
    assert json.loads(out)[0]["score"] == 1


def test_cli_network_templates_seed_default(capsys, db) -> None:
    exit_code, out, _ = run(capsys, "network", "templates", "--owner", "user_1", "--db", db)

    assert exit_code == 0
    assert [t["title"] for t in json.loads(out)] == ["Default Connection Request"]


def test_cli_admin_requires_configured_secret(capsys, db, monkeypatch) -> None:
    exit_code, _, err = run(capsys, "admin", "backfill-history", "--secret", "x", "--db", db)
    assert exit_code == 1
    assert "Unauthorized" in err

    monkeypatch.setenv("ADMIN_SECRET", "s3cret")
    exit_code, out, _ = run(
        capsys, "admin", "migrate-statuses", "--secret", "s3cret", "--db", db
    )
    assert exit_code == 0
    assert json.loads(out) == {"processed": 0, "updated": 0, "created": 0}


def test_cli_missing_board_template_fails_cleanly(capsys, db, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("BOARD_TEMPLATE_PATH", str(tmp_path / "missing.yaml"))

    exit_code, _, err = run(capsys, "columns", "list", "--owner", "u", "--db", db)

    assert exit_code == 1
    assert "Board template not found" in err


def test_cli_network_referrals_and_removal(capsys, db) -> None:
    exit_code, out, _ = run(
        capsys, "network", "add-company", "--owner", "user_1", "--name", "Initech", "--db", db
    )
    assert exit_code == 0
    company_id = out.strip()
    exit_code, out, _ = run(
        capsys,
        "network", "add-referral",
        "--owner", "user_1",
        "--company-id", company_id,
        "--name", "Peter Gibbons",
        "--db", db,
    )
    referral_id = out.strip()

    exit_code, out, _ = run(
        capsys,
        "network", "referrals", "--owner", "user_1", "--company-id", company_id, "--db", db,
    )
    assert exit_code == 0
    assert [r["id"] for r in json.loads(out)] == [referral_id]

    exit_code, out, _ = run(
        capsys, "network", "remove-referral", "--referral-id", referral_id, "--db", db
    )
    assert (exit_code, out.strip()) == (0, "ok")

    exit_code, _, err = run(
        capsys, "network", "remove-referral", "--referral-id", referral_id, "--db", db
    )
    assert exit_code == 1
    assert "Referral not found" in err


def test_cli_community_timeline_and_share(capsys, db) -> None:
    seeded = seed(capsys, db)
    for company in ("Initech", "Globex"):
        run(
            capsys,
            "items", "add-application",
            "--owner", "user_1",
            "--status", seeded["application"][0],
            "--company", company,
            "--position", "Engineer",
            "--date-applied", "2024-01-15",
            "--db", db,
        )

    exit_code, out, _ = run(
        capsys, "community", "timeline", "--search", "globex", "--db", db
    )
    assert exit_code == 0
    page = json.loads(out)
    assert [a["company_name"] for a in page["applications"]] == ["Globex"]
    assert page["applications"][0]["status_name"] == "Applied"

    exit_code, _, _ = run(capsys, "community", "share", "--owner", "user_1", "--off", "--db", db)
    assert exit_code == 0
    exit_code, out, _ = run(capsys, "community", "timeline", "--db", db)
    assert json.loads(out)["total"] == 0
