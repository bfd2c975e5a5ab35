from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: loading and merging of configuration sources
(defaults, persistent storage and CLI overrides), logging bootstrap,
subcommand dispatch and result rendering.
"""

import json
import os
import sys
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from geopath.core.analysis.tree_renderer import render_folder_tree, render_selection
from geopath.core.codec.path_codec import decode, encode_storage_path, extract_leaf_display_name
from geopath.core.hierarchy.builder import build_folder_hierarchy
from geopath.core.hierarchy.grouping import breadcrumbs, parent_key
from geopath.core.selection.providers import InMemoryHierarchyProvider
from geopath.core.selection.tree import SelectionTree
from geopath.core.services.folder_cache import FolderIndexCache
from geopath.core.services.settings_validator import validate_config
from geopath.domain.config import get_default_config, load_config
from geopath.domain.errors import GeoPathError
from geopath.domain.hierarchy import get_mode
from geopath.domain.path_models import FolderNode
from geopath.domain.selection_models import HierarchyProvider
from geopath.infra.fs import read_identifier_file, read_json_document
from geopath.infra.logging import LoggingConfig, configure_logging, get_logger
from geopath.infra.network import HttpHierarchyProvider
from geopath.interface.cli import args as cli_args

logger = get_logger(__name__)

_folder_cache: Optional[Tuple[Tuple[Any, Any], FolderIndexCache]] = None

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, non-zero for failure).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Resolve base configuration (Default vs Persistent state)
    base_conf = get_default_config() if args.use_defaults else load_config()

    # 3. Map and merge command-line overrides, then validate
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    # 4. Logging bootstrap (console stderr, optional rotating file)
    logging_conf = LoggingConfig(
        level=clean_conf["log_level"],
        console=True,
        log_file=clean_conf["log_file"] or None,
    )
    configure_logging(logging_conf)

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    # Short-circuit if configuration dump is requested
    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    handler = _COMMANDS.get(args.command or "")
    if handler is None:
        parser.print_help(sys.stderr)
        return 2

    logger.debug(f"CLI command '{args.command}' initiated.")
    try:
        return handler(args, clean_conf)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130
    except (GeoPathError, OSError, ValueError, FutureTimeoutError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        logger.critical(f"Unexpected failure in '{args.command}': {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys with a non-None value are merged.
    """
    out = dict(base)
    keys_to_merge = ["hierarchy_mode", "min_level", "base_url", "log_level"]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# COMMANDS: CODEC
# -----------------------------------------------------------------------------

def _cmd_encode(args: Any, conf: Dict[str, Any]) -> int:
    print(encode_storage_path(args.path))
    return 0


def _cmd_decode(args: Any, conf: Dict[str, Any]) -> int:
    print(decode(args.identifier).as_storage_path())
    return 0


def _cmd_name(args: Any, conf: Dict[str, Any]) -> int:
    print(extract_leaf_display_name(args.identifier))
    return 0

# -----------------------------------------------------------------------------
# COMMANDS: FOLDER HIERARCHY
# -----------------------------------------------------------------------------

def _cmd_tree(args: Any, conf: Dict[str, Any]) -> int:
    identifiers = read_identifier_file(args.input_file)
    tree = build_folder_hierarchy(identifiers)

    if args.json_output:
        payload = {
            "accepted": tree.accepted,
            "skipped": tree.skipped,
            "root": _folder_to_dict(tree.root),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    lines: List[str] = ["/"]
    render_folder_tree(tree.root, lines, show_items=args.show_items)
    print("\n".join(lines))
    print(f"\n{tree.accepted} identifiers placed, {tree.skipped} skipped.")
    return 0


def _cmd_group(args: Any, conf: Dict[str, Any]) -> int:
    cache = _get_folder_cache(conf)
    collection_id = os.path.abspath(args.input_file)
    index = cache.get_or_build(collection_id, lambda: read_identifier_file(args.input_file))

    entry = index.get(args.folder)
    if entry is None:
        print(f"ERROR: Folder '{args.folder}' not found.", file=sys.stderr)
        return 2

    payload = {
        "folder": entry.folder,
        "display_path": entry.display_path,
        "parent": parent_key(entry.folder) if entry.folder else None,
        "breadcrumbs": [asdict(b) for b in breadcrumbs(entry.folder)],
        "subfolders": entry.subfolders,
        "items": [
            {
                "identifier": item.identifier,
                "storage_path": item.storage_path,
                "display_name": item.display_name,
            }
            for item in entry.items
        ],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _get_folder_cache(conf: Dict[str, Any]) -> FolderIndexCache:
    """
    Return the process-wide folder index cache.

    The cache is rebuilt when the configured TTL or capacity changes.
    """
    global _folder_cache
    settings = (conf["cache_ttl_seconds"], conf["cache_max_entries"])
    if _folder_cache is None or _folder_cache[0] != settings:
        cache = FolderIndexCache(ttl_seconds=settings[0], max_entries=settings[1])
        _folder_cache = (settings, cache)
    return _folder_cache[1]

# -----------------------------------------------------------------------------
# COMMANDS: SELECTION
# -----------------------------------------------------------------------------

def _cmd_levels(args: Any, conf: Dict[str, Any]) -> int:
    mode = get_mode(conf["hierarchy_mode"])
    if args.json_output:
        payload = {
            "mode": mode.code,
            "levels": [
                {"depth": depth, "name": level.name, "label": level.label}
                for depth, level in enumerate(mode.levels)
            ],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"{mode.code}:")
    for depth, level in enumerate(mode.levels):
        print(f"  {depth}  {level.label:<10} ({level.name})")
    return 0


def _cmd_select(args: Any, conf: Dict[str, Any]) -> int:
    timeout = conf["request_timeout"]
    paths = [p.strip().strip("/") for p in args.paths if p.strip().strip("/")]
    provider = _build_provider(args, conf)

    try:
        with SelectionTree(
                provider,
                mode=conf["hierarchy_mode"],
                min_level=conf["min_level"],
                max_workers=conf["max_workers"],
        ) as tree:
            tree.load_roots().result(timeout=timeout)
            tree.restore_selection(paths)
            unknown = [p for p in paths if tree.reveal(p, timeout=timeout) is None]

            selected = tree.collect_selected_paths()
            too_shallow = [p for p in tree.validate(paths) if p not in unknown]
            tree_lines = render_selection(tree.views()) if args.show_tree else []
    finally:
        provider.close()

    ok = not unknown and not too_shallow
    if args.json_output:
        payload = {
            "mode": conf["hierarchy_mode"],
            "min_level": conf["min_level"],
            "selected": selected,
            "too_shallow": too_shallow,
            "unknown": unknown,
            "ok": ok,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_selection_summary(selected, too_shallow, unknown, tree_lines)

    return 0 if ok else 1


def _build_provider(args: Any, conf: Dict[str, Any]) -> HierarchyProvider:
    if args.source_file:
        logger.info(f"Using offline hierarchy document: {args.source_file}")
        return InMemoryHierarchyProvider(read_json_document(args.source_file))
    logger.info(f"Using hierarchy backend: {conf['base_url']}")
    return HttpHierarchyProvider(conf["base_url"], timeout=conf["request_timeout"])

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _folder_to_dict(node: FolderNode) -> Dict[str, Any]:
    return {
        "key": node.encoded_path,
        "name": node.name,
        "display_path": node.display_path,
        "items": sorted(node.items),
        "children": [_folder_to_dict(node.children[k]) for k in node.child_keys],
    }


def _print_selection_summary(
        selected: List[str],
        too_shallow: List[str],
        unknown: List[str],
        tree_lines: List[str],
) -> None:
    if tree_lines:
        print("\n".join(tree_lines))
        print()

    print(f"Selected ({len(selected)}):")
    for path in selected:
        print(f"  - {path}")

    if too_shallow:
        print(f"Too shallow ({len(too_shallow)}):")
        for path in too_shallow:
            print(f"  - {path}")

    if unknown:
        print(f"Not found ({len(unknown)}):")
        for path in unknown:
            print(f"  - {path}")


_COMMANDS: Dict[str, Callable[[Any, Dict[str, Any]], int]] = {
    "encode": _cmd_encode,
    "decode": _cmd_decode,
    "name": _cmd_name,
    "tree": _cmd_tree,
    "group": _cmd_group,
    "levels": _cmd_levels,
    "select": _cmd_select,
}

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
