"""
Command-line interface for qualkit.

This module provides a CLI for creating and inspecting coding projects.
"""

import argparse
import logging
import sys
from pathlib import Path

from .. import __version__
from ..config.settings import get_settings_manager
from ..core.errors import FileError, QualkitError
from ..core.session import ProjectSession
from ..infrastructure.logging_config import get_logger, setup_logging
from ..infrastructure.paths import normalize_project_path
from ..infrastructure.project_store import JsonProjectRepository
from ..infrastructure.text_loader import TextFileLoader

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="qualkit",
        description="Qualitative data coding projects"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"qualkit {__version__}"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    new_parser = subparsers.add_parser("new", help="Create an empty project")
    new_parser.add_argument("project", type=Path, help="Path of the project file to create")
    new_parser.add_argument("--name", help="Project name (defaults to the file name)")

    info_parser = subparsers.add_parser("info", help="Display project information")
    info_parser.add_argument("project", type=Path, help="Path to the project file")

    add_parser = subparsers.add_parser("add-file", help="Add a source file to a project")
    add_parser.add_argument("project", type=Path, help="Path to the project file")
    add_parser.add_argument("file", type=Path, help="Source file to add")

    codes_parser = subparsers.add_parser("codes", help="List themes and codes")
    codes_parser.add_argument("project", type=Path, help="Path to the project file")

    return parser


def create_session() -> ProjectSession:
    return ProjectSession(JsonProjectRepository(), TextFileLoader(), get_settings_manager())


def cmd_new(args: argparse.Namespace, session: ProjectSession) -> int:
    """
    Create an empty project file.

    Returns:
        Exit code (0 for success).
    """
    path = normalize_project_path(args.project)
    name = args.name or path.name.split(".")[0]

    project = session.new_project(path, name)
    print(f"Created project '{project.name}' at {path}")
    return 0


def cmd_info(args: argparse.Namespace, session: ProjectSession) -> int:
    """
    Display a summary of a project.

    Returns:
        Exit code (0 for success).
    """
    project = session.load_project(normalize_project_path(args.project))

    with session.reading() as (codebook, file_list):
        print(f"Project: {project.name}")
        print(f"Version: {project.version}")
        print(f"Created: {project.created_at.isoformat(timespec='seconds')}")
        print(f"Modified: {project.modified_at.isoformat(timespec='seconds')}")
        print(f"Files: {file_list.file_count()}")
        print(f"Themes: {codebook.theme_count()}")
        print(f"Codes: {codebook.code_def_count()}")
        print(f"Applied codes: {len(codebook.get_all_qual_codes())}")

        orphans = sum(1 for _ in codebook.get_orphaned_codes(file_list.block_to_file_map()))
        if orphans:
            print(f"Applied codes without a loaded file: {orphans}")

    return 0


def cmd_add_file(args: argparse.Namespace, session: ProjectSession) -> int:
    """
    Add a source file to a project, load it and save the project.

    A file whose content cannot be loaded is still added, in error state.

    Returns:
        Exit code (0 for success, 1 if the content could not be loaded).
    """
    session.load_project(normalize_project_path(args.project))

    file_id = session.add_file(args.file.resolve())
    exit_code = 0
    try:
        session.open_file(file_id)
    except FileError as e:
        logger.error(str(e))
        exit_code = 1

    session.save_project()

    with session.reading() as (_, file_list):
        blocks = file_list.file(file_id).blocks() or ()
    print(f"Added {args.file.name} ({len(blocks)} blocks)")
    return exit_code


def cmd_codes(args: argparse.Namespace, session: ProjectSession) -> int:
    """
    List themes with their codes, then top-level codes.

    Returns:
        Exit code (0 for success).
    """
    session.load_project(normalize_project_path(args.project))

    with session.reading() as (codebook, _):
        def describe(code_def) -> str:
            count = sum(1 for _ in codebook.get_codes_for_def(code_def.id))
            return f"{code_def.name} [color {code_def.color}] ({count} applied)"

        for theme in codebook.get_all_themes():
            print(f"{theme.name} [color {theme.color}]")
            for code_def in codebook.get_codes_in_theme(theme.id):
                print(f"  - {describe(code_def)}")

        top_level = list(codebook.get_top_level_codes())
        if top_level:
            print("(no theme)")
            for code_def in top_level:
                print(f"  - {describe(code_def)}")

    return 0


COMMANDS = {
    "new": cmd_new,
    "info": cmd_info,
    "add-file": cmd_add_file,
    "codes": cmd_codes,
}


def main(argv=None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings_manager().get()
    log_level = logging.DEBUG if args.verbose else settings.log_level
    setup_logging(
        level=log_level,
        log_file=settings.resolved_log_file(),
        log_to_file=settings.log_to_file,
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args, create_session())
    except (QualkitError, OSError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
