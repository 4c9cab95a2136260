#!/usr/bin/env python3
"""
Generate mock bank lineage data for datachat.

Creates the three lineage relations with a realistic layered structure:
- bank_datasets - dataset_id, dataset_name, category, layer, owner
- bank_jobs     - job_id, job_name, schedule
- bank_lineage  - lineage_id, source_dataset, target_dataset, job_id

Layers: src_ (raw feeds) -> stg_ (cleansed) -> fact_ (per category)
-> rpt_ (reports), plus one cross-category regulatory report.

Written as CSV files and/or a single SQLite image, both of which datachat
ingests directly.
"""

import argparse
import random
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd


# Output directory
OUTPUT_DIR = Path("sample_data")


# =============================================================================
# Data Model Definition - Bank Datasets per Category
# =============================================================================

CATEGORIES = {
    "Loans": ["loan_contracts", "loan_payments", "collateral"],
    "Deposits": ["deposit_accounts", "deposit_transactions"],
    "Payments": ["card_transactions", "wire_transfers"],
    "Customer": ["customers", "addresses"],
    "Risk": ["ratings", "exposures"],
}

OWNERS = ["data_eng", "finance_it", "risk_it", "bi_team"]
SCHEDULES = ["daily 02:00", "daily 04:00", "hourly", "weekly"]

REGULATORY_CATEGORY = "Finance"


def generate_datasets(seed: int = 42) -> pd.DataFrame:
    """Generate bank_datasets: every layer for every category."""
    random.seed(seed)  # Reproducible results

    rows = []

    def add(name: str, category: str, layer: str):
        rows.append({
            "dataset_id": f"DS{len(rows) + 1:03d}",
            "dataset_name": name,
            "category": category,
            "layer": layer,
            "owner": random.choice(OWNERS),
        })

    for category, entities in CATEGORIES.items():
        for entity in entities:
            add(f"src_{entity}", category, "src")
        for entity in entities:
            add(f"stg_{entity}", category, "stg")
        add(f"fact_{category.lower()}", category, "fact")
        add(f"rpt_{category.lower()}_summary", category, "rpt")

    add("rpt_regulatory_capital", REGULATORY_CATEGORY, "rpt")
    add("rpt_liquidity_coverage", REGULATORY_CATEGORY, "rpt")

    return pd.DataFrame(rows)


def generate_lineage(datasets: pd.DataFrame, seed: int = 42) -> Dict[str, pd.DataFrame]:
    """
    Generate bank_jobs and bank_lineage for a dataset frame.

    Each target dataset is loaded by one job; the job reads one or more
    source datasets, one lineage row per source.

    Returns:
        Dict with "bank_jobs" and "bank_lineage" DataFrames
    """
    random.seed(seed + 1)

    ids = dict(zip(datasets["dataset_name"], datasets["dataset_id"]))
    jobs: List[Dict] = []
    edges: List[Dict] = []

    def load(target: str, sources: List[str]):
        job_id = f"J{len(jobs) + 1:03d}"
        jobs.append({
            "job_id": job_id,
            "job_name": f"load_{target}",
            "schedule": random.choice(SCHEDULES),
        })
        for source in sources:
            edges.append({
                "lineage_id": len(edges) + 1,
                "source_dataset": ids[source],
                "target_dataset": ids[target],
                "job_id": job_id,
            })

    for category, entities in CATEGORIES.items():
        for entity in entities:
            sources = [f"src_{entity}"]
            # Some staging tables enrich from a sibling feed
            siblings = [e for e in entities if e != entity]
            if siblings and random.random() < 0.4:
                sources.append(f"src_{random.choice(siblings)}")
            load(f"stg_{entity}", sources)

        fact = f"fact_{category.lower()}"
        fact_sources = [f"stg_{e}" for e in entities]
        if category != "Customer":
            fact_sources.append("stg_customers")
        load(fact, fact_sources)

        report_sources = [fact]
        if category != "Risk" and random.random() < 0.5:
            report_sources.append("fact_risk")
        load(f"rpt_{category.lower()}_summary", report_sources)

    load("rpt_regulatory_capital", ["fact_loans", "fact_risk", "fact_deposits"])
    load("rpt_liquidity_coverage", ["fact_deposits", "fact_payments"])

    return {
        "bank_jobs": pd.DataFrame(jobs),
        "bank_lineage": pd.DataFrame(edges),
    }


def generate_all(seed: int = 42) -> Dict[str, pd.DataFrame]:
    datasets = generate_datasets(seed)
    frames = {"bank_datasets": datasets}
    frames.update(generate_lineage(datasets, seed))
    return frames


def write_csv(frames: Dict[str, pd.DataFrame], output_dir: Path) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for name, df in frames.items():
        path = output_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        print(f"Created: {path} ({len(df)} rows)")
        paths.append(path)
    return paths


def write_sqlite(frames: Dict[str, pd.DataFrame], path: Path) -> Path:
    """Write every frame as a table of one SQLite database image."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        path.unlink()

    conn = sqlite3.connect(str(path))
    try:
        for name, df in frames.items():
            df.to_sql(name, conn, index=False)
        conn.commit()
    finally:
        conn.close()

    print(f"Created: {path} ({len(frames)} tables)")
    return path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate mock bank lineage data for datachat")
    parser.add_argument('--format', choices=['csv', 'sqlite', 'both'], default='both',
                        help='Output format (default: both)')
    parser.add_argument('--output', type=Path, default=OUTPUT_DIR,
                        help='Output directory (default: sample_data)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed (default: 42)')

    args = parser.parse_args(argv)

    print("Generating bank lineage mock data for datachat...\n")

    frames = generate_all(args.seed)

    if args.format in ('csv', 'both'):
        write_csv(frames, args.output)
    if args.format in ('sqlite', 'both'):
        write_sqlite(frames, args.output / "bank_demo.sqlite3")

    # Print statistics
    print(f"\n=== Statistics ===")
    print(f"Datasets: {len(frames['bank_datasets'])}")
    print(f"Jobs: {len(frames['bank_jobs'])}")
    print(f"Lineage edges: {len(frames['bank_lineage'])}")
    print(f"Categories: {frames['bank_datasets']['category'].value_counts().to_dict()}")

    print("\nDone! Files created in:", args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
