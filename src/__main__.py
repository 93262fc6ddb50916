"""Main entry point for the resume pipeline."""

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from src import __version__
from src.config.settings import Settings
from src.utils.logging import configure_logging

T = TypeVar("T")


def _write_json(path: Path, payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json")
        return str(value)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(payload, indent=2, default=_default),
        encoding="utf-8",
    )


async def _with_store(
    settings: Settings, action: Callable[..., Awaitable[T]], with_runs: bool = False
) -> T:
    """Open the tabular store (and run repository), run ``action``, close both."""
    from src.pipeline.repository import PipelineRunRepository
    from src.storage.sqlite import SqliteTabularStore

    store = SqliteTabularStore(settings.store_path)
    await store.initialize()
    runs = None
    try:
        if with_runs:
            runs = PipelineRunRepository(settings.store_path)
            await runs.initialize()
            return await action(store, runs)
        return await action(store)
    finally:
        if runs is not None:
            await runs.close()
        await store.close()


def _build_pipeline(settings: Settings, store, runs):
    from src.llm.client import CompletionClient
    from src.pipeline.service import ResumePipeline

    return ResumePipeline(store, runs, CompletionClient(), settings)


def _print_stage(result) -> int:
    stream = sys.stdout if result.success else sys.stderr
    prefix = "" if result.success else "Error: "
    print(f"{prefix}{result.message}", file=stream)
    if result.run is not None:
        print(f"Run: {result.run.run_id} ({result.run.status.value})")
        if not result.success and result.run.message:
            print(result.run.message, file=sys.stderr)
    return 0 if result.success else 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="resume-pipeline",
        description="Score, tailor and render a master resume against a job description",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src import-master master.csv
  python -m src score job.txt
  python -m src export-selections selections.csv
  python -m src import-selections selections.csv
  python -m src tailor <run-id>
  python -m src assemble <run-id>
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Pipeline commands",
    )

    import_master = subparsers.add_parser(
        "import-master", help="Load the master resume table from a CSV file"
    )
    import_master.add_argument("csv_path", type=Path, help="CSV export of the master resume")

    normalize = subparsers.add_parser(
        "normalize", help="Normalize the master table and print or save the record"
    )
    normalize.add_argument(
        "--out", type=Path, default=None, help="Write the record as JSON to this path"
    )

    score = subparsers.add_parser(
        "score", help="Stage 1: analyze a job description and score the master resume"
    )
    score.add_argument("jd_path", type=Path, help="Text file with the job description")

    export_sel = subparsers.add_parser(
        "export-selections", help="Write the selection table to CSV for review"
    )
    export_sel.add_argument("csv_path", type=Path)

    import_sel = subparsers.add_parser(
        "import-selections", help="Replace the selection table with a reviewed CSV"
    )
    import_sel.add_argument("csv_path", type=Path)

    select = subparsers.add_parser(
        "select", help="Mark (or with --clear, unmark) selection rows by id"
    )
    select.add_argument("unique_ids", nargs="+", help="Row ids such as EXP-1-2")
    select.add_argument("--clear", action="store_true", help="Unmark instead of mark")

    tailor = subparsers.add_parser("tailor", help="Stage 2: tailor selected bullets")
    tailor.add_argument("run_id")

    assemble = subparsers.add_parser(
        "assemble", help="Stage 3: assemble the final resume and render it"
    )
    assemble.add_argument("run_id")
    assemble.add_argument(
        "--template", type=Path, default=None, help="Word template (overrides settings)"
    )

    runs = subparsers.add_parser("runs", help="List recent pipeline runs")
    runs.add_argument("--limit", type=int, default=20)

    init_template = subparsers.add_parser(
        "init-template", help="Write a starter Word template with all placeholders"
    )
    init_template.add_argument("path", type=Path, nargs="?", default=None)

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level, log_file=settings.log_file)

    # If no command specified, show help
    if parsed.command is None:
        parser.print_help()
        return 0

    logger.info(f"resume-pipeline v{__version__}: {parsed.command}")

    try:
        return _dispatch(parsed, settings)
    except Exception as e:
        logger.error(f"{parsed.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _dispatch(parsed: argparse.Namespace, settings: Settings) -> int:
    if parsed.command == "import-master":
        from src.storage.csv_io import import_csv

        async def _import(store) -> int:
            return await import_csv(store, settings.master_table, parsed.csv_path)

        count = asyncio.run(_with_store(settings, _import))
        print(f"Imported {count} rows into '{settings.master_table}'")
        return 0

    if parsed.command == "normalize":
        from src.resume.normalizer import ResumeNormalizer

        async def _read(store):
            return await store.read_all_rows(settings.master_table)

        record = ResumeNormalizer().normalize(asyncio.run(_with_store(settings, _read)))
        if parsed.out:
            _write_json(parsed.out, record.to_dict())
            print(f"Wrote: {parsed.out}")
        else:
            print(f"Name: {record.personal_info.full_name or '(none)'}")
            for section in record.sections:
                print(f"- {section.title.value}: {len(section.all_items())} items")
        return 0

    if parsed.command == "score":
        jd_text = parsed.jd_path.read_text(encoding="utf-8")

        async def _score(store, runs):
            return await _build_pipeline(settings, store, runs).analyze_and_score(jd_text)

        return _print_stage(asyncio.run(_with_store(settings, _score, with_runs=True)))

    if parsed.command == "tailor":

        async def _tailor(store, runs):
            return await _build_pipeline(settings, store, runs).tailor_selected(parsed.run_id)

        return _print_stage(asyncio.run(_with_store(settings, _tailor, with_runs=True)))

    if parsed.command == "assemble":

        async def _assemble(store, runs):
            pipeline = _build_pipeline(settings, store, runs)
            return await pipeline.assemble_and_render(parsed.run_id, parsed.template)

        return _print_stage(asyncio.run(_with_store(settings, _assemble, with_runs=True)))

    if parsed.command == "export-selections":
        from src.storage.csv_io import export_csv

        async def _export(store) -> int:
            return await export_csv(store, settings.selection_table, parsed.csv_path)

        count = asyncio.run(_with_store(settings, _export))
        print(f"Exported {count} rows to {parsed.csv_path}")
        return 0

    if parsed.command == "import-selections":
        from src.storage.csv_io import import_csv

        async def _import_sel(store) -> int:
            return await import_csv(store, settings.selection_table, parsed.csv_path)

        count = asyncio.run(_with_store(settings, _import_sel))
        print(f"Imported {count} rows into '{settings.selection_table}'")
        return 0

    if parsed.command == "select":
        from src.selection.store import SelectionStore

        async def _select(store) -> list[str]:
            selections = SelectionStore(store, settings.selection_table)
            missing = []
            for unique_id in parsed.unique_ids:
                if not await selections.set_selected(unique_id, not parsed.clear):
                    missing.append(unique_id)
            return missing

        missing = asyncio.run(_with_store(settings, _select))
        if missing:
            print(f"Error: unknown ids: {', '.join(missing)}", file=sys.stderr)
            return 1
        action = "Cleared" if parsed.clear else "Selected"
        print(f"{action} {len(parsed.unique_ids)} rows")
        return 0

    if parsed.command == "runs":

        async def _list(store, runs):
            return await runs.list_recent(parsed.limit)

        recent = asyncio.run(_with_store(settings, _list, with_runs=True))
        if not recent:
            print("No runs yet.")
        for run in recent:
            target = " at ".join(p for p in (run.job_title, run.company) if p) or "(untitled)"
            line = f"{run.run_id}  {run.status.value:<20} {target}"
            if run.output_path:
                line += f"  -> {run.output_path}"
            print(line)
        return 0

    if parsed.command == "init-template":
        from src.rendering.config import RenderConfig
        from src.rendering.renderer import build_default_template

        path = build_default_template(parsed.path or RenderConfig().template_path)
        print(f"Wrote: {path}")
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
