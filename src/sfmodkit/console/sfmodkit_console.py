import argparse
import logging
import os
from pathlib import Path

from sfmodkit.game import data
from sfmodkit.game.environment import ToolContext
from sfmodkit.game.locator import SystemProbe, default_cascade
from sfmodkit.game.plugins import classify, default_report_path, load_plugins, render_report
from sfmodkit.helpers import file_ops
from sfmodkit.helpers.errors import (
    ArchiveNotFoundError,
    ArchiveReadError,
    FileLoggingSetupError,
    GameNotFoundError,
    MalformedPluginListError,
    PluginListNotFoundError,
    ReportWriteError,
    UnsupportedArchiveError,
)

logger = logging.getLogger("sfmodkit")


def simple_end(message: str, ex: Exception | None = None) -> int:
    logger.error(f"{message}: {ex}" if ex else message)
    print(f"ERROR: {message}")
    if ex is not None:
        print(f"  {ex}")
    return 1


def locate(context: ToolContext, probe: SystemProbe | None = None) -> str:
    cascade = default_cascade(probe, context.config.extra_candidate_paths)
    return cascade.resolve()


def run_locate(context: ToolContext, probe: SystemProbe | None = None) -> int:
    try:
        game_dir = locate(context, probe)
    except GameNotFoundError as ex:
        return simple_end("Game installation not found", ex)
    print(game_dir)
    return 0


def run_extract(options: argparse.Namespace, context: ToolContext,
                probe: SystemProbe | None = None) -> int:
    if options.game_dir:
        game_dir = os.path.normpath(options.game_dir)
        logger.info(f"Using game dir from arguments: '{game_dir}'")
    else:
        try:
            game_dir = locate(context, probe)
        except GameNotFoundError as ex:
            return simple_end("Game installation not found, can't extract scripts", ex)

    archive_path = Path(game_dir, *data.SCRIPTS_ARCHIVE)
    destination = Path(game_dir, *data.SCRIPTS_DESTINATION)
    try:
        written = file_ops.extract_matching_from_to(archive_path, destination, options.extension)
    except ArchiveNotFoundError as ex:
        return simple_end("Scripts archive not found", ex)
    except (UnsupportedArchiveError, ArchiveReadError) as ex:
        return simple_end("Scripts archive can't be read", ex)
    except OSError as ex:
        return simple_end("Couldn't write extracted files", ex)

    print(f"Extracted {len(written)} '*{options.extension}' files to '{destination}'")
    return 0


def run_plugins(options: argparse.Namespace, context: ToolContext) -> int:
    input_file = Path(options.input_file)
    output_file = Path(options.output_file) if options.output_file else default_report_path(input_file)
    data_folder = options.data_folder or context.config.data_folder or data.DEFAULT_DATA_FOLDER

    try:
        plugins = load_plugins(input_file)
    except PluginListNotFoundError as ex:
        return simple_end("Input file not found", ex)
    except MalformedPluginListError as ex:
        return simple_end("Input file is not a valid plugin list", ex)

    if not os.path.isdir(data_folder):
        logger.debug(f"Data folder doesn't exist: '{data_folder}'")

    result = classify(plugins, context.config.official_plugins)
    logger.debug(f"Classified: {len(result.official)} official, {len(result.managed)} managed, "
                 f"{len(result.unmanaged)} unmanaged")
    report = render_report(result, input_file, data_folder)

    try:
        file_ops.write_report(report, output_file)
    except ReportWriteError as ex:
        return simple_end("Report couldn't be saved", ex)

    print("\n".join(report))
    print(f"Report saved to '{output_file}'")
    return 0


def main(options: argparse.Namespace, probe: SystemProbe | None = None,
         log_dir: str | None = None) -> int:
    context = ToolContext(options.config, debug=options.debug)
    try:
        context.setup_loggers(log_dir)
    except FileLoggingSetupError as ex:
        print(f"ERROR: {ex}")
        return 1

    try:
        context.load_config()
        match options.command:
            case "locate":
                return run_locate(context, probe)
            case "extract":
                return run_extract(options, context, probe)
            case "plugins":
                return run_plugins(options, context)
            case _:
                return simple_end(f"Unknown command '{options.command}'")
    finally:
        context.close_loggers()
