#!/usr/bin/env python
"""
excel_marshal – CLI entry point.

Usage:
    # Export records listed in a YAML file to a workbook
    python -m excel_marshal.main export <module:Class> <records.yaml> [--output out.xlsx]

    # Import a workbook and write the records as YAML
    python -m excel_marshal.main import <module:Class> <file.xlsx> [--output records.yaml]

Both commands accept ``--config`` (YAML settings), ``--resolver module:attr``
(an object with ``bookmark_for`` / ``lookup`` for entity-valued columns) and
``--log-level``.
"""

import argparse
import importlib
import logging
import os
import sys

import yaml

from excel_marshal.config import load_config
from excel_marshal.memento import from_plain, to_plain
from excel_marshal.schema import new_transient_instance
from excel_marshal.service import ExcelService

logger = logging.getLogger(__name__)


def setup_logging(level_str="INFO"):
    """Configure logging."""
    level = getattr(logging, str(level_str).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def load_object(spec):
    """Resolve ``"package.module:attr"`` to the named object."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Expected 'module:name', got {spec!r}")
    obj = importlib.import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part)
    return obj


# ------------------------------------------------------------------
# YAML records
# ------------------------------------------------------------------

def records_from_yaml(cls, path, service):
    """Build instances of *cls* from a YAML list of mappings."""
    with open(path, "r") as f:
        rows = yaml.safe_load(f) or []
    if not isinstance(rows, list):
        raise ValueError(f"{path} must hold a list of records")

    records = []
    for i, row in enumerate(rows, 1):
        record = new_transient_instance(cls)
        for name, raw in (row or {}).items():
            prop = service.introspector.property_named(cls, str(name))
            if prop is None:
                logger.warning(f"Record {i}: ignoring unknown property '{name}'")
                continue
            prop.write(record, from_plain(prop, raw, service.resolver))
        records.append(record)
    return records


def records_to_plain(cls, records, service):
    props = service.introspector.properties(cls)
    return [
        {p.name: to_plain(p, p.read(r), service.resolver) for p in props}
        for r in records
    ]


def records_to_yaml(cls, records, path, service):
    """Write *records* as a YAML list of plain-value mappings."""
    rows = records_to_plain(cls, records, service)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(rows, f, sort_keys=False, allow_unicode=True)
    return path


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------

def build_parser():
    parser = argparse.ArgumentParser(
        description="Export typed records to Excel and import them back"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("record_type", help="Record class as 'module:Class'")
    common.add_argument("--config", default=None, help="Path to config YAML file")
    common.add_argument(
        "--resolver", default=None,
        help="Reference resolver as 'module:attr' (default: empty registry)",
    )
    common.add_argument(
        "--log-level", default=None,
        help="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    # ---- export ----
    p_exp = sub.add_parser(
        "export", parents=[common],
        help="Write records from a YAML file to an Excel workbook",
    )
    p_exp.add_argument("records_file", help="YAML list of records")
    p_exp.add_argument(
        "--output", default=None,
        help="Output workbook path (default: a temporary file)",
    )

    # ---- import ----
    p_imp = sub.add_parser(
        "import", parents=[common],
        help="Read records from an Excel workbook into a YAML file",
    )
    p_imp.add_argument("excel_file", help="Path to the workbook (.xlsx)")
    p_imp.add_argument(
        "--output", default=None,
        help="Output YAML path (default: print to stdout)",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    setup_logging(args.log_level or config.get("log_level", "INFO"))

    cls = load_object(args.record_type)
    resolver = load_object(args.resolver) if args.resolver else None
    service = ExcelService(config=config, resolver=resolver)

    if args.command == "export":
        if not os.path.exists(args.records_file):
            logger.error(f"Records file not found: {args.records_file}")
            sys.exit(1)
        records = records_from_yaml(cls, args.records_file, service)
        path = service.to_excel(cls, records, output_path=args.output)
        print(path)
        return path

    if not os.path.exists(args.excel_file):
        logger.error(f"Excel file not found: {args.excel_file}")
        sys.exit(1)
    records = service.from_excel(cls, args.excel_file)
    if args.output:
        records_to_yaml(cls, records, args.output, service)
        logger.info(f"Wrote {len(records)} record(s) to {args.output}")
    else:
        yaml.safe_dump(records_to_plain(cls, records, service), sys.stdout,
                       sort_keys=False, allow_unicode=True)
    return records


if __name__ == "__main__":
    main()
