from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema: global diagnostic flags plus one
subcommand per codec, hierarchy and selection operation. Provides logic to
translate raw argparse namespaces into configuration overrides.
"""

import argparse
from typing import Any, Dict

from geopath.domain.constants import APP_NAME
from geopath.domain.hierarchy import supported_modes

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the GeoPath CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="geopath",
        description=f"{APP_NAME}: hierarchical path identifiers and geographic selection trees.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    # --- Codec ---
    enc = sub.add_parser("encode", help="Encode a slash-separated path into a flat identifier.")
    enc.add_argument("path", help="Path such as 'Morobe Province/Lae District/photo.jpg'.")

    dec = sub.add_parser("decode", help="Decode a flat identifier into a slash-separated path.")
    dec.add_argument("identifier")

    name = sub.add_parser("name", help="Extract the display name from an identifier's leaf.")
    name.add_argument("identifier")

    # --- Folder Hierarchy ---
    tree = sub.add_parser("tree", help="Rebuild and print the folder tree of an identifier list.")
    tree.add_argument("-i", "--input", dest="input_file", required=True,
                      help="Text file with one identifier per line.")
    tree.add_argument("--items", dest="show_items", action="store_true",
                      help="Also list the items stored in each folder.")
    _add_json_flag(tree)

    group = sub.add_parser("group", help="Show one folder of an identifier list.")
    group.add_argument("-i", "--input", dest="input_file", required=True,
                       help="Text file with one identifier per line.")
    group.add_argument("--folder", dest="folder", default="",
                       help="Encoded folder key (default: root).")

    # --- Selection ---
    levels = sub.add_parser("levels", help="Print the level table of a hierarchy mode.")
    _add_mode_flag(levels)
    _add_json_flag(levels)

    select = sub.add_parser("select", help="Resolve a saved selection against the hierarchy.")
    _add_mode_flag(select)
    select.add_argument("--min-level", dest="min_level", type=int, default=None,
                        help="Minimum accepted depth (0 = top level).")
    source = select.add_mutually_exclusive_group()
    source.add_argument("--source", dest="source_file", default=None,
                        help="JSON hierarchy document used instead of the backend.")
    source.add_argument("--base-url", dest="base_url", default=None,
                        help="Backend root URL serving /api/geo.")
    select.add_argument("--show-tree", dest="show_tree", action="store_true",
                        help="Print the loaded selection tree.")
    select.add_argument("paths", nargs="*", help="Previously selected slash-joined paths.")
    _add_json_flag(select)

    return p


def _add_mode_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        dest="hierarchy_mode",
        type=str.upper,
        choices=supported_modes(),
        default=None,
        help="Hierarchy mode (default from configuration).",
    )


def _add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Emit machine-readable JSON.",
    )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only options present on the chosen subcommand are considered.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["hierarchy_mode"] = getattr(args, "hierarchy_mode", None)
    overrides["min_level"] = getattr(args, "min_level", None)
    overrides["base_url"] = getattr(args, "base_url", None)

    if args.debug:
        overrides["log_level"] = "DEBUG"

    return overrides
