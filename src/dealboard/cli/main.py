"""Main CLI entry point."""

import argparse
import json
import logging
import sys
import threading
from datetime import datetime, time, timezone
from pathlib import Path
from typing import Any, Optional


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    """Where raw records come from: a JSON file, a SQLite store or an HTTP endpoint."""
    parser.add_argument("--input", type=Path, default=None, help="Read raw deals from JSON file")
    parser.add_argument("--db", type=Path, default=None, help="Read raw deals from SQLite store")
    parser.add_argument("--url", type=str, default=None, help="Read raw deals from HTTP endpoint")
    parser.add_argument(
        "--now",
        type=str,
        default=None,
        help="Reference date for time windows (YYYY-MM-DD, default: today)",
    )


def _add_period_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--period",
        type=str,
        default=None,
        help="this-month | last-month | last-quarter | ytd | last-year | all-time",
    )
    parser.add_argument("--start", type=str, default=None, help="Custom range start (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, default=None, help="Custom range end (YYYY-MM-DD)")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dealboard", description="Dealership deal metrics dashboards")
    parser.add_argument("--config", type=Path, default=None, help="Path to dealboard YAML config")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # dashboard
    dashboard_parser = subparsers.add_parser("dashboard", help="Aggregate deals into a dashboard")
    dashboard_parser.add_argument("--type", dest="dashboard_type", default=None, help="Dashboard type")
    dashboard_parser.add_argument("--role", dest="user_role", default=None, help="User role")
    dashboard_parser.add_argument("--participant", default=None, help="Participant id to credit")
    _add_source_args(dashboard_parser)
    _add_period_args(dashboard_parser)
    dashboard_parser.add_argument(
        "--include-inactive",
        action="store_true",
        help="Include unwound, dead and unmappable deals",
    )
    dashboard_parser.add_argument(
        "--salespeople",
        action="store_true",
        help="Include per-salesperson metrics",
    )
    dashboard_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file")

    # manager
    manager_parser = subparsers.add_parser("manager", help="Sales-manager dashboard")
    manager_parser.add_argument("--dealership", default=None, help="Dealership id")
    _add_source_args(manager_parser)
    _add_period_args(manager_parser)
    manager_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file")

    # normalize
    normalize_parser = subparsers.add_parser("normalize", help="Dump normalized, enriched deals")
    normalize_parser.add_argument("--type", dest="dashboard_type", default=None, help="Dashboard type")
    _add_source_args(normalize_parser)
    normalize_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file")

    # store
    store_parser = subparsers.add_parser("store", help="Manage the SQLite record store")
    store_parser.add_argument("action", choices=["import", "list", "count"])
    store_parser.add_argument(
        "--db",
        type=Path,
        default=Path("dealboard.db"),
        help="Path to SQLite database",
    )
    store_parser.add_argument("--partition", default="financeDeals", help="Partition key")
    store_parser.add_argument("--input", type=Path, default=None, help="JSON file to import")
    store_parser.add_argument(
        "--replace",
        action="store_true",
        help="Replace the partition instead of appending (import)",
    )

    # watch
    watch_parser = subparsers.add_parser("watch", help="Print dashboard summaries as they refresh")
    watch_parser.add_argument("--type", dest="dashboard_type", default=None, help="Dashboard type")
    watch_parser.add_argument("--participant", default=None, help="Participant id to credit")
    _add_source_args(watch_parser)
    _add_period_args(watch_parser)
    watch_parser.add_argument("--interval", type=float, default=None, help="Seconds between refreshes")
    watch_parser.add_argument(
        "--iterations",
        type=int,
        default=1,
        help="Stop after this many refreshes (default: 1)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "dashboard":
        _run_dashboard(args)
    elif args.command == "manager":
        _run_manager(args)
    elif args.command == "normalize":
        _run_normalize(args)
    elif args.command == "store":
        _run_store(args)
    elif args.command == "watch":
        _run_watch(args)
    else:
        parser.print_help()


def _load_config(args: argparse.Namespace):
    from dealboard.config import load_config
    from dealboard.errors import ConfigError

    try:
        return load_config(args.config)
    except ConfigError as e:
        raise SystemExit(str(e))


def _read_json_records(path: Path) -> list[Any]:
    """Raw records from a JSON file: an array, or an object with a deals/data array."""
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise SystemExit(f"Cannot read {path}: {e}")
    if isinstance(data, dict):
        data = data.get("deals", data.get("data", data))
    if not isinstance(data, list):
        raise SystemExit(f"{path} must contain a JSON array of deals")
    return data


def _build_store(args: argparse.Namespace, config):
    from dealboard.store import HttpRecordStore, MemoryRecordStore, SQLiteRecordStore

    if args.input:
        records = _read_json_records(args.input)
        keys = {key for keys in config.partitions.values() for key in keys}
        keys.update(config.default_partitions)
        return MemoryRecordStore({key: records for key in keys})
    if args.db:
        return SQLiteRecordStore(args.db)
    if args.url:
        return HttpRecordStore(args.url)
    if config.store_db_path:
        return SQLiteRecordStore(config.store_db_path)
    if config.store_url:
        return HttpRecordStore(config.store_url)
    raise SystemExit("No record source. Use --input, --db or --url (or set store_db_path / store_url).")


def _clock(args: argparse.Namespace):
    if not args.now:
        return None
    try:
        day = datetime.strptime(args.now, "%Y-%m-%d")
    except ValueError:
        raise SystemExit("Invalid --now format. Use YYYY-MM-DD.")
    fixed = datetime.combine(day.date(), time(12, 0), tzinfo=timezone.utc)
    return lambda: fixed


def _time_period(args: argparse.Namespace):
    if args.start or args.end:
        from dealboard.models import CustomRange

        try:
            return CustomRange(start=args.start, end=args.end)
        except ValueError:
            raise SystemExit("Invalid --start/--end. Use YYYY-MM-DD.")
    return args.period


def _provider(args: argparse.Namespace):
    from dealboard.provider import DashboardDataProvider

    config = _load_config(args)
    store = _build_store(args, config)
    return DashboardDataProvider(store, config=config, clock=_clock(args))


def _dashboard_options(args: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = {
        "participantId": args.participant,
        "includeInactive": getattr(args, "include_inactive", False),
        "includeSalespeople": getattr(args, "salespeople", False),
    }
    if getattr(args, "user_role", None):
        options["userRole"] = args.user_role
    period = _time_period(args)
    if period is not None:
        options["timePeriod"] = period
    return options


def _emit(payload: Any, output: Optional[Path], summary: str) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"{summary} (wrote to {output})")
    else:
        print(text)


def _run_dashboard(args: argparse.Namespace) -> None:
    """Run dashboard command."""
    provider = _provider(args)
    data = provider.get_dashboard_data(args.dashboard_type, _dashboard_options(args))
    if data.error:
        print(f"Dashboard error: {data.error}", file=sys.stderr)
    _emit(data.to_json_dict(), args.output, f"Dashboard: {data.metrics.total_deals} deals")
    if data.error:
        raise SystemExit(1)


def _run_manager(args: argparse.Namespace) -> None:
    """Run manager command."""
    provider = _provider(args)
    data = provider.get_manager_dashboard_data(args.dealership, _time_period(args))
    if data.error:
        print(f"Manager dashboard error: {data.error}", file=sys.stderr)
    _emit(data.to_json_dict(), args.output, f"Manager dashboard: {data.metrics.total_deals} deals")
    if data.error:
        raise SystemExit(1)


def _run_normalize(args: argparse.Namespace) -> None:
    """Run normalize command."""
    from dealboard.enrichment import enrich
    from dealboard.normalizing import normalize_many

    provider = _provider(args)
    records = provider.load_records(args.dashboard_type)
    deals = [enrich(d) for d in normalize_many(records)]
    errored = sum(1 for d in deals if d.error)
    if errored:
        print(f"{errored} of {len(deals)} records could not be fully mapped", file=sys.stderr)
    _emit(
        [d.model_dump(mode="json", by_alias=True) for d in deals],
        args.output,
        f"Normalized {len(deals)} deals",
    )


def _run_store(args: argparse.Namespace) -> None:
    """Run store command."""
    from dealboard.errors import StoreError
    from dealboard.store import SQLiteRecordStore

    try:
        store = SQLiteRecordStore(args.db)
        if args.action == "import":
            if not args.input:
                raise SystemExit("store import requires --input")
            records = _read_json_records(args.input)
            if args.replace:
                written = store.replace(args.partition, records)
            else:
                written = store.append(args.partition, records)
            print(f"Imported {written} records into {args.partition}")
        elif args.action == "list":
            print(json.dumps(store.read(args.partition), indent=2, default=str))
        elif args.action == "count":
            print(store.count(args.partition))
    except StoreError as e:
        raise SystemExit(str(e))


def _run_watch(args: argparse.Namespace) -> None:
    """Run watch command: print one summary line per delivered refresh."""
    provider = _provider(args)
    done = threading.Event()
    seen = 0

    def on_update(data) -> None:
        nonlocal seen
        seen += 1
        m = data.metrics
        line = (
            f"[{data.last_updated}] {data.period_label or '-'}: {m.total_deals} deals, "
            f"{m.funded_deals} funded, {m.pending_deals} pending, total gross {m.total_gross:.2f}"
        )
        if data.error:
            line += f" (error: {data.error})"
        print(line, flush=True)
        if seen >= args.iterations:
            done.set()

    subscription = provider.subscribe(
        args.dashboard_type,
        _dashboard_options(args),
        on_update,
        interval=args.interval,
    )
    try:
        done.wait()
    except KeyboardInterrupt:
        pass
    finally:
        subscription.close()


if __name__ == "__main__":
    main()
