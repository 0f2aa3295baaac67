import logging
import lzma
import os
import shutil
import tempfile
import typing
import zipfile
import zlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import py7zr
import yaml
from py7zr.exceptions import ArchiveError

from sfmodkit.helpers.errors import (
    ArchiveNotFoundError,
    ArchiveReadError,
    ReportWriteError,
    UnsupportedArchiveError,
)

logger = logging.getLogger("sfmodkit")


@dataclass(frozen=True)
class ArchiveEntry:
    full_path: str
    base_name: str

    @classmethod
    def from_name(cls, name: str) -> "ArchiveEntry":
        return cls(full_path=name, base_name=name.replace("\\", "/").rsplit("/", 1)[-1])


def _remember_written(written: dict[Path, None], target: Path) -> None:
    # later entries with the same base name overwrite earlier ones
    written.pop(target, None)
    written[target] = None


def extract_matching_from_zip(archive_path: str | Path, to_path: str | Path,
                              extension: str) -> list[Path]:
    written: dict[Path, None] = {}
    try:
        archive = zipfile.ZipFile(archive_path, "r")
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as ex:
        raise ArchiveReadError(archive_path, str(ex)) from ex

    with archive:
        for info in archive.infolist():
            if info.is_dir() or not info.filename.endswith(extension):
                continue
            entry = ArchiveEntry.from_name(info.filename)
            target = Path(to_path, entry.base_name)
            try:
                with archive.open(info) as source, target.open("wb") as dest:
                    shutil.copyfileobj(source, dest)
            except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError) as ex:
                # damaged member, don't leave a truncated copy behind
                target.unlink(missing_ok=True)
                raise ArchiveReadError(archive_path, f"{info.filename}: {ex}") from ex
            _remember_written(written, target)
    return list(written)


def extract_matching_from_7z(archive_path: str | Path, to_path: str | Path,
                             extension: str) -> list[Path]:
    written: dict[Path, None] = {}
    try:
        with py7zr.SevenZipFile(str(archive_path), "r") as archive:
            entries = [ArchiveEntry.from_name(file.filename) for file in archive.list()
                       if not file.is_directory and file.filename.endswith(extension)]
            if not entries:
                return []
            # 7z can't stream single members, unpack selected ones aside and flatten afterwards
            with tempfile.TemporaryDirectory() as tmp_dir:
                archive.extract(path=tmp_dir, targets=[entry.full_path for entry in entries])
                for entry in entries:
                    target = Path(to_path, entry.base_name)
                    shutil.copyfile(Path(tmp_dir, entry.full_path), target)
                    _remember_written(written, target)
    except (ArchiveError, lzma.LZMAError, EOFError) as ex:
        raise ArchiveReadError(archive_path, str(ex) or type(ex).__name__) from ex
    return list(written)


def extract_matching_from_to(archive_path: str | Path, to_path: str | Path,
                             extension: str) -> list[Path]:
    """Extract archive entries ending with extension into a single flat directory.

    Internal directory structure is discarded, the last entry with a given
    base name wins. Safe to run again over the same destination.
    """
    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise ArchiveNotFoundError(archive_path)

    extractor: Callable[[str | Path, str | Path, str], list[Path]]
    match archive_path.suffix.lower():
        case ".zip":
            extractor = extract_matching_from_zip
        case ".7z":
            extractor = extract_matching_from_7z
        case _:
            raise UnsupportedArchiveError(archive_path)

    os.makedirs(to_path, exist_ok=True)
    logger.debug(f"Extracting '*{extension}' from '{archive_path}' to '{to_path}'")
    written = extractor(archive_path, to_path, extension)
    logger.debug(f"Extracted {len(written)} files")
    return written


def write_report(lines: Iterable[str], path: str | Path) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            fh.write("\n".join(lines) + "\n")
    except OSError as ex:
        raise ReportWriteError(path, ex.strerror or str(ex)) from ex
    return path


def load_yaml(stream: typing.IO) -> Any:  # noqa: ANN401
    try:
        return yaml.safe_load(stream)
    except yaml.YAMLError:
        logger.exception("Unable to load yaml")
        return None


def read_yaml(yaml_path: str | Path) -> Any:  # noqa: ANN401
    try:
        with open(yaml_path, encoding="utf-8") as stream:
            loaded = load_yaml(stream)
    except (OSError, UnicodeDecodeError):
        logger.warning(f"Couldn't open yaml at: '{yaml_path}'", exc_info=True)
        return None
    if loaded is None:
        logger.warning(f"Couldn't read yaml at: '{yaml_path}'")
    return loaded
