"""
End-to-end tests: demo data through the session facade and the CLI.

Run with:
    python -m pytest datachat/tests/test_session.py -v
"""

import json

import pytest

from datachat import cli, generate_mock_data
from datachat.config import AppConfig, LayoutConfig
from datachat.contracts import ValidationError
from datachat.models.dataclasses import UploadedFile
from datachat.models.enums import IngestErrorKind
from datachat.session import DataChatSession


@pytest.fixture
def demo_dir(tmp_path):
    out = tmp_path / "demo"
    generate_mock_data.main(["--output", str(out), "--format", "both"])
    return out


def test_mock_data_is_deterministic():
    first = generate_mock_data.generate_all(seed=7)
    second = generate_mock_data.generate_all(seed=7)

    for name in ("bank_datasets", "bank_jobs", "bank_lineage"):
        assert first[name].equals(second[name]), f"{name} differs between runs"

    ids = set(first["bank_datasets"]["dataset_id"])
    lineage = first["bank_lineage"]
    assert set(lineage["source_dataset"]) <= ids
    assert set(lineage["target_dataset"]) <= ids
    assert set(lineage["job_id"]) <= set(first["bank_jobs"]["job_id"])


def test_session_with_csv_demo(demo_dir):
    with DataChatSession() as session:
        results = session.ingest_paths([demo_dir / "bank_datasets.csv",
                                        demo_dir / "bank_jobs.csv",
                                        demo_dir / "bank_lineage.csv"])
        assert all(r.ok for r in results)

        assert session.has_lineage()
        categories = session.list_categories()
        assert "Loans" in categories and "Finance" in categories

        graph = session.build_lineage_graph()
        assert len(graph.nodes) == len(generate_mock_data.generate_datasets())
        assert all(n.name.startswith(("src_", "stg_", "fact_", "rpt_")) for n in graph.nodes), \
            "Node names come from bank_datasets"

        top = session.build_lineage_graph(top10=True)
        assert len(top.nodes) == 10

        loans = session.build_lineage_graph(["Loans"])
        assert set(loans.node_ids) < set(graph.node_ids)


def test_session_with_sqlite_demo(demo_dir):
    with DataChatSession() as session:
        results = session.ingest_paths([demo_dir / "bank_demo.sqlite3"])

        assert results[0].ok
        assert sorted(results[0].summary.table_names) == ["bank_datasets", "bank_jobs", "bank_lineage"]
        assert [t.table_name for t in session.current_schema()] == ["bank_datasets", "bank_jobs", "bank_lineage"]


def test_directory_ingest_skips_unknown_files(demo_dir):
    (demo_dir / "README.txt").write_text("not data", encoding="utf-8")

    with DataChatSession() as session:
        results = session.ingest_paths([demo_dir])

    assert [r.file_name for r in results] == [
        "bank_datasets.csv", "bank_demo.sqlite3", "bank_jobs.csv", "bank_lineage.csv",
    ]


def test_unreadable_path_does_not_stop_the_batch(demo_dir, tmp_path):
    missing = tmp_path / "missing.csv"

    with DataChatSession() as session:
        results = session.ingest_paths([missing, demo_dir / "bank_jobs.csv"])

        assert [r.file_name for r in results] == ["missing.csv", "bank_jobs.csv"]
        assert results[0].error.kind == IngestErrorKind.UNREADABLE_INPUT
        assert results[0].error.is_fatal
        assert results[1].ok, "Later paths still load"
        assert session.store.table_names() == ["bank_jobs"]


def test_last_request_wins(demo_dir):
    """A graph built before a later load is reported as superseded."""
    with DataChatSession() as session:
        session.ingest_paths([demo_dir / "bank_demo.sqlite3"])
        graph = session.build_lineage_graph()
        assert session.is_current(graph)

        session.detect_and_ingest(UploadedFile("extra.csv", "a\n1\n"))
        assert not session.is_current(graph), "A newer load supersedes the graph"

        first = session.start_layout(graph)
        second = session.start_layout(session.build_lineage_graph(top10=True))
        assert first.disposed and not second.disposed

        node_id = second.nodes[0].id
        first.pin(node_id, 99, 99)  # disposed, ignored
        session.pin(node_id, 10, 10)
        second.step()
        position = second.positions()[node_id]
        assert (position.x, position.y, position.pinned) == (10, 10, True), "Session pins go to the live layout"

        session.unpin(node_id)
        assert second.alpha_target == 0


def test_build_without_lineage_relations():
    with DataChatSession() as session:
        session.detect_and_ingest(UploadedFile("t.csv", "a\n1\n"))

        assert session.list_categories() == []
        with pytest.raises(ValidationError):
            session.build_lineage_graph()


def test_config_from_dict(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "top_n": 5,
        "layout": {"width": 400, "height": 300, "max_iterations": 40, "unknown": 1},
        "lineage": {"dataset_table": "sets"},
        "demos": [],
    }), encoding="utf-8")

    config = AppConfig.from_json(path)

    assert config.top_n == 5
    assert config.layout.canvas_size == (400, 300)
    assert config.layout.max_iterations == 40
    assert config.layout.alpha_decay == pytest.approx(LayoutConfig().alpha_decay)
    assert config.lineage.dataset_table == "sets"
    assert config.lineage.edge_table == "bank_lineage"


def test_cli_lineage_json(demo_dir, tmp_path, capsys):
    out = tmp_path / "out"
    status = cli.main([str(demo_dir / "bank_demo.sqlite3"), "--top10", "--layout",
                       "--json", "--output", str(out)])

    assert status == 0
    printed = capsys.readouterr().out
    assert "Lineage: 10 nodes" in printed

    written = sorted(out.glob("lineage_*.json"))
    assert len(written) == 1
    data = json.loads(written[0].read_text(encoding="utf-8"))
    assert len(data["nodes"]) == 10
    assert len(data["layout"]["positions"]) == 10
    assert (out / "datachat.log").exists()


def test_cli_query(demo_dir, tmp_path, capsys):
    out = tmp_path / "out"
    status = cli.main([str(demo_dir / "bank_jobs.csv"), "--output", str(out),
                       "--query", "```sql\nSELECT job_id FROM bank_jobs ORDER BY job_id LIMIT 2\n```"])

    assert status == 0
    assert (out / "datachat.csv").read_text(encoding="utf-8").splitlines() == ["job_id", "J001", "J002"]


def test_cli_reports_failures(tmp_path):
    bad = tmp_path / "broken.db"
    bad.write_bytes(b"nope")

    assert cli.main([str(bad), "--output", str(tmp_path / "out")]) == 1


def test_cli_reports_missing_path(demo_dir, tmp_path, capsys):
    status = cli.main([str(tmp_path / "nope.csv"), str(demo_dir / "bank_jobs.csv"),
                       "--no-lineage", "--output", str(tmp_path / "out")])

    assert status == 1
    printed = capsys.readouterr().out
    assert "nope.csv" in printed
    assert "bank_jobs" in printed, "Readable inputs are still loaded"
