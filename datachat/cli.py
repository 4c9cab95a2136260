"""
datachat command line.

Loads CSV/TSV files and SQLite images into an in-memory store, prints the
resulting schema, and builds / lays out the dataset lineage graph when the
lineage relations are present.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import AppConfig, Config
from .contracts import ValidationError
from .log import level_from_flags, setup_logging
from .models.dataclasses import IngestResult, LayoutSnapshot, LineageGraph
from .output import ExcelWriter
from .query import QueryError, extract_sql, preview, results_to_csv
from .session import DataChatSession


logger = logging.getLogger(__name__)

VERSION = Config.VERSION


def print_results(results: List[IngestResult]) -> None:
    for result in results:
        if result.ok:
            summary = result.summary
            print(f"  OK    {result.file_name}: {summary.total_rows} rows -> "
                  f"{', '.join(summary.table_names)}")
        else:
            error = result.error
            print(f"  {error.severity.value:<5} {result.file_name}: {error.message}")


def print_schema(session: DataChatSession) -> None:
    schema = session.current_schema()
    print(f"\nTables: {len(schema)}")
    for table in schema:
        columns = ", ".join(f"{c.name} {c.storage_type}".strip() for c in table.columns)
        print(f"  {table.table_name} ({columns})")


def write_json(output_dir: Path, graph: LineageGraph,
               layout: Optional[LayoutSnapshot] = None) -> Path:
    """Write the graph (and final layout) as JSON for a renderer."""
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    path = output_dir / f'lineage_{timestamp}.json'

    data = graph.to_dict()
    if layout is not None:
        data['layout'] = layout.to_dict()

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, default=str)

    logger.info(f"Written: {path}")
    return path


def run_lineage(session: DataChatSession, args, output_dir: Path) -> int:
    categories = session.list_categories()
    if categories:
        print(f"\nCategories: {', '.join(categories)}")

    try:
        graph = session.build_lineage_graph(args.category or [], args.top10)
    except ValidationError as e:
        logger.warning(f"Lineage unavailable: {e}")
        return 1

    print(f"\nLineage: {len(graph.nodes)} nodes, {len(graph.links)} links")
    for node in sorted(graph.nodes, key=lambda n: n.degree, reverse=True)[:Config.TOP_N]:
        print(f"  {node.degree:>3}  {node.name}")

    layout = None
    if args.layout:
        handle = session.start_layout(graph)
        layout = handle.run()
        print(f"Layout converged after {layout.tick} ticks (alpha={layout.alpha:.4f})")

    if args.json:
        print(f"\nOutput: {write_json(output_dir, graph, layout)}")
    if args.excel:
        writer = ExcelWriter(output_dir)
        print(f"\nOutput: {writer.write(session.current_schema(), graph, layout)}")

    return 0


def run_sql(session: DataChatSession, sql: str, output_dir: Path, excel: bool) -> int:
    try:
        frame = session.run_query(sql)
    except QueryError as e:
        logger.error(str(e))
        return 1

    if frame.empty:
        print("\nNo rows.")
        return 0

    print()
    print(preview(frame).to_string(index=False))

    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / 'datachat.csv'
    csv_path.write_text(results_to_csv(frame), encoding='utf-8')
    print(f"\nOutput: {csv_path}")

    if excel:
        print(f"Output: {ExcelWriter(output_dir).write_query(frame)}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='datachat - Load data files and explore dataset lineage',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s bank_datasets.csv bank_jobs.csv bank_lineage.csv --layout --json
  %(prog)s demo.sqlite3 --category Loans --category Deposits --top10
  %(prog)s data/ --query "SELECT * FROM bank_jobs"
        """
    )

    # Input
    parser.add_argument('inputs', nargs='+', type=Path,
                        help='CSV/TSV/SQLite files or directories')

    # Lineage
    parser.add_argument('--category', action='append',
                        help='Keep datasets of this category (repeatable; default: all)')
    parser.add_argument('--top10', action='store_true',
                        help='Keep only the most connected datasets')
    parser.add_argument('--layout', action='store_true',
                        help='Run the force layout to convergence')
    parser.add_argument('--no-lineage', action='store_true',
                        help='Skip the lineage graph')

    # Query
    parser.add_argument('--query', help='Read-only SQL (a fenced markdown block is accepted)')

    # Output
    parser.add_argument('--output', type=Path, default=Path('output/'),
                        help='Output directory (default: output/)')
    parser.add_argument('--json', action='store_true', help='Write lineage JSON')
    parser.add_argument('--excel', action='store_true', help='Write Excel workbook')
    parser.add_argument('--config', type=Path, help='JSON config with overrides')

    # Logging
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument('--verbose', action='store_true', help='Verbose output')
    log_group.add_argument('--debug', action='store_true', help='Debug output')
    log_group.add_argument('--trace', action='store_true', help='Trace output')

    parser.add_argument('--version', action='version', version=f'%(prog)s {VERSION}')

    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(level_from_flags(args.verbose, args.debug, args.trace), args.output)

    logger.info(f"datachat v{VERSION}")

    config = AppConfig.from_json(args.config) if args.config else AppConfig()

    with DataChatSession(config) as session:
        print(f"Loading {len(args.inputs)} input(s)")
        results = session.ingest_paths(args.inputs)
        print_results(results)
        print_schema(session)

        status = 0 if all(r.ok or not r.error.is_fatal for r in results) else 1

        if args.query:
            status = max(status, run_sql(session, extract_sql(args.query), args.output, args.excel))
        elif not args.no_lineage and session.has_lineage():
            status = max(status, run_lineage(session, args, args.output))
        elif args.excel:
            print(f"\nOutput: {ExcelWriter(args.output).write(session.current_schema())}")

    return status


if __name__ == '__main__':
    sys.exit(main())
