"""Formsmith CLI: extract/consolidate, generate and inspect commands."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Optional


def _configure_logging(args) -> None:
    if getattr(args, "verbose", False):
        level = logging.DEBUG
    elif getattr(args, "quiet", False):
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main():
    """Main CLI entry point for formsmith commands."""
    try:
        formsmith_version = get_version("formsmith")
    except PackageNotFoundError:
        formsmith_version = "dev"

    parser = argparse.ArgumentParser(
        prog="formsmith",
        description="Formsmith: extract form fields from design documents and synthesize form configs"
    )
    parser.add_argument("--version", action="version", version=f"formsmith {formsmith_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log detection decisions (DEBUG)."
    )

    # Design source arguments shared by extract and inspect
    design_parser = argparse.ArgumentParser(add_help=False)
    design_parser.add_argument(
        "--design",
        required=True,
        help="Design URL (with node-id) or path to a design JSON document"
    )
    design_parser.add_argument(
        "--node-id",
        default=None,
        help="Node id to select (overrides the URL's node-id)"
    )
    design_parser.add_argument(
        "--token",
        default=None,
        help="Design API access token (defaults to $FIGMA_TOKEN)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # extract command (stage one)
    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract fields, merge DB mappings and formulas, write the consolidated workbook",
        parents=[parent_parser, design_parser]
    )
    extract_parser.add_argument(
        "--db-mapping",
        type=Path,
        required=True,
        help="DB mapping file (.xlsx, .csv, .txt, .tsv, .docx)"
    )
    extract_parser.add_argument(
        "--computed",
        type=Path,
        default=None,
        help="Computed fields file (optional, same formats)"
    )
    extract_parser.add_argument(
        "--plan-type",
        default=None,
        help="Plan type recorded on every row (defaults to $FORMSMITH_PLAN_TYPE or MEDICAL)"
    )
    extract_parser.add_argument(
        "--out",
        type=Path,
        required=True,
        help="Output consolidated workbook (.xlsx or .csv)"
    )
    extract_parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional JSON report of diagnostics"
    )
    extract_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when consolidation reports errors"
    )

    # generate command (stage two)
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate config JSON from a consolidated workbook",
        parents=[parent_parser]
    )
    generate_parser.add_argument(
        "--rows",
        type=Path,
        required=True,
        help="Consolidated workbook (.xlsx or .csv)"
    )
    generate_parser.add_argument(
        "--out",
        type=Path,
        required=True,
        help="Output config JSON file"
    )

    # inspect command
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print a design tree outline and the fields extracted from it",
        parents=[parent_parser, design_parser]
    )
    inspect_parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Maximum outline depth"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args)

    if args.command == "extract":
        try:
            from .api import consolidate_inputs, extract
            from .settings import Settings
            from ._internal.canonical_json import canonical_dumps
            from ._internal.io.workbook import write_consolidated_workbook

            settings = Settings.from_env()
            result = extract(args.design, node_id=args.node_id, token=args.token, settings=settings)

            if not result.fields:
                print("Error: No fields found in design node. Please check the node id.", file=sys.stderr)
                sys.exit(1)

            consolidation = consolidate_inputs(
                result,
                args.db_mapping,
                args.computed,
                plan_type=args.plan_type,
                settings=settings,
            )
            rows_path = write_consolidated_workbook(consolidation.rows, args.out)

            report_path: Optional[Path] = None
            if args.report is not None:
                report_path = Path(args.report)
                report_path.parent.mkdir(parents=True, exist_ok=True)
                report = {
                    "strategy": result.strategy,
                    "field_count": len(result.fields),
                    "ok": consolidation.ok,
                    "errors": [issue.model_dump(mode="json") for issue in consolidation.errors],
                    "warnings": [issue.model_dump(mode="json") for issue in consolidation.warnings],
                }
                report_path.write_text(canonical_dumps(report) + "\n", encoding="utf-8")

            if not args.quiet:
                print("[OK] Extraction complete")
                print(f"  Strategy: {result.strategy.upper()}")
                if result.degraded:
                    print("  Note: no sections detected; fields recovered by fallback extraction")
                print(f"  Fields: {len(result.fields)}")
                print(f"  Rows: {rows_path}")
                if report_path is not None:
                    print(f"  Report: {report_path}")
                print(f"  Errors: {len(consolidation.errors)}")
                print(f"  Warnings: {len(consolidation.warnings)}")
                for issue in consolidation.errors:
                    print(f"    row {issue.row} ({issue.field}): {issue.message}")

            if args.strict and not consolidation.ok:
                sys.exit(2)
            sys.exit(0)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)
    elif args.command == "generate":
        try:
            from .api import generate_configs
            from ._internal.io.config_export import write_configs

            records = generate_configs(args.rows)
            config_path = write_configs(records, args.out)

            if not args.quiet:
                print("[OK] Config generation complete")
                print(f"  Records: {len(records)}")
                print(f"  Config: {config_path}")
            sys.exit(0)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)
    elif args.command == "inspect":
        try:
            from .api import load_design
            from .kernel.extract import extract_fields
            from .kernel.nodes import describe_tree
            from .settings import Settings

            root = load_design(args.design, node_id=args.node_id, token=args.token, settings=Settings.from_env())
            result = extract_fields(root)

            for line in describe_tree(root, max_depth=args.depth):
                print(line)
            print("")
            print(f"Strategy: {result.strategy.upper()}")
            print(f"Fields: {len(result.fields)}")
            for field in result.fields:
                location = "/".join(part for part in (field.section, field.subsection) if part) or "-"
                print(f"  [{field.screen_name}] {location} #{field.order}: {field.field_name}")
            sys.exit(0)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
