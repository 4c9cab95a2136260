"""Helpers shared by the test modules."""

from typing import Dict, Iterable, List, Optional, Tuple

from datachat.store import WorkingStore


def load_lineage(store: WorkingStore,
                 edges: Iterable[Tuple],
                 datasets: Optional[Iterable[Tuple]] = None,
                 jobs: Optional[Iterable[Tuple]] = None) -> None:
    """
    Create the bank_* relations.

    edges: (source, target, job_id); lineage ids are assigned in order
    datasets: (dataset_id, dataset_name, category); when omitted every edge
        endpoint gets a row with no name or category
    jobs: (job_id, job_name)
    """
    conn = store.connection
    conn.execute(
        "CREATE TABLE bank_lineage (lineage_id INTEGER, source_dataset TEXT, "
        "target_dataset TEXT, job_id TEXT)"
    )
    conn.execute("CREATE TABLE bank_datasets (dataset_id TEXT, dataset_name TEXT, category TEXT)")
    conn.execute("CREATE TABLE bank_jobs (job_id TEXT, job_name TEXT)")

    edges = list(edges)
    conn.executemany(
        "INSERT INTO bank_lineage VALUES (?, ?, ?, ?)",
        [(i + 1, s, t, j) for i, (s, t, j) in enumerate(edges)],
    )
    if datasets is None:
        endpoints = dict.fromkeys(d for s, t, _ in edges for d in (s, t))
        datasets = [(d, None, None) for d in endpoints]
    conn.executemany("INSERT INTO bank_datasets VALUES (?, ?, ?)", list(datasets or []))
    conn.executemany("INSERT INTO bank_jobs VALUES (?, ?)", list(jobs or []))


def rows_of(store: WorkingStore, table: str) -> List[Dict]:
    return store.query(f'SELECT * FROM "{table}"')
