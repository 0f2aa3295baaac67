import argparse
import re
from functools import cache

from sfmodkit.game import data


def init_input_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-config", help="path to yaml config file", required=False)
    common.add_argument("-debug", help="verbose diagnostic output",
                        action="store_true", default=False, required=False)

    parser = argparse.ArgumentParser(description=f"{data.GAME_NAME} install locator and plugin reporter")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("locate", parents=[common],
                        help="find game installation directory")

    extract = commands.add_parser("extract", parents=[common],
                                  help="extract script sources from bundled archive")
    extract.add_argument("-game_dir", help="path to game directory, skips auto detection",
                         required=False)
    extract.add_argument("-extension", help="extension of archive entries to extract",
                         default=data.SCRIPT_EXTENSION, required=False)

    plugins = commands.add_parser("plugins", parents=[common],
                                  help="classify plugin list and write report")
    plugins.add_argument("-input_file", help="path to json array of plugins", required=True)
    plugins.add_argument("-output_file", help="path to report, defaults to timestamped file near input",
                         required=False)
    plugins.add_argument("-data_folder", help="path to game Data folder", required=False)

    return parser


@cache
def _pair_pattern(key: str) -> re.Pattern:
    return re.compile(rf'"{re.escape(key)}"\s+"([^"]*)"')


def scan_key_values(text: str, key: str) -> list[str]:
    """Harvest every `"key" "value"` pair from loosely structured text.

    Nesting is ignored, values are returned literally in order of appearance,
    escape sequences are not interpreted.
    """
    return _pair_pattern(key).findall(text)


def clean_registry_path(value: str | None) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().strip('"').strip()
