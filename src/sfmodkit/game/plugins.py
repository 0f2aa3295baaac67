import json
import logging
import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pathvalidate import sanitize_filename
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sfmodkit.game import data
from sfmodkit.helpers.errors import MalformedPluginListError, PluginListNotFoundError

logger = logging.getLogger("sfmodkit")

PUNCTUATION = re.compile(r"[^\w\s]|_")
WHITESPACE = re.compile(r"\s+")


class PluginRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    name: str = ""
    mod_id: Any = Field(default=None, alias="modId")

    @field_validator("name", mode="before")
    @classmethod
    def convert_missing_name(cls, value: Any) -> Any:  # noqa: ANN401
        return "" if value is None else value

    @property
    def has_mod_id(self) -> bool:
        return bool(self.mod_id)


@dataclass
class ClassificationResult:
    official: list[str] = field(default_factory=list)
    managed: list[str] = field(default_factory=list)
    unmanaged: list[str] = field(default_factory=list)


def load_plugins(json_path: str | Path) -> list[PluginRecord]:
    json_path = Path(json_path)
    if not json_path.is_file():
        raise PluginListNotFoundError(json_path)

    try:
        with json_path.open(encoding="utf-8-sig") as fh:
            loaded = json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as ex:
        raise MalformedPluginListError(json_path, str(ex)) from ex
    except OSError as ex:
        raise PluginListNotFoundError(json_path, f"can't be read: {ex.strerror or ex}") from ex

    if not isinstance(loaded, list):
        raise MalformedPluginListError(json_path, f"expected a json array, got {type(loaded).__name__}")

    records = []
    for index, item in enumerate(loaded):
        if not isinstance(item, dict):
            raise MalformedPluginListError(json_path, f"element {index} is not an object: {item!r}")
        try:
            records.append(PluginRecord.model_validate(item))
        except ValidationError as ex:
            raise MalformedPluginListError(json_path, f"element {index}: {ex}") from ex
    logger.debug(f"Loaded {len(records)} plugin records from '{json_path}'")
    return records


def classify(plugins: Iterable[PluginRecord], official_names: Collection[str]) -> ClassificationResult:
    """Split plugin names into official, managed and unmanaged.

    Official names are matched exactly (case-sensitive). Any name that is
    managed somewhere in the list is dropped from unmanaged.
    """
    result = ClassificationResult()
    for plugin in plugins:
        if not plugin.name:
            continue
        if plugin.name in official_names:
            result.official.append(plugin.name)
        elif plugin.has_mod_id:
            result.managed.append(plugin.name)
        else:
            result.unmanaged.append(plugin.name)

    managed = set(result.managed)
    result.unmanaged = [name for name in result.unmanaged if name not in managed]
    return result


def _strip_plugin_extension(name: str) -> str:
    for extension in data.PLUGIN_EXTENSIONS:
        if name.lower().endswith(extension):
            return name[:-len(extension)]
    return name


def _slug_words(name: str) -> list[str]:
    cleaned = PUNCTUATION.sub("", _strip_plugin_extension(name))
    return WHITESPACE.sub(" ", cleaned).strip().lower().split(" ")


def search_slug(name: str) -> str:
    return " ".join(_slug_words(name))


def marketplace_slug(name: str) -> str:
    return "+".join(_slug_words(name))


def search_engine_url(name: str) -> str:
    return data.SEARCH_ENGINE_URL.format(query=quote(search_slug(name)))


def marketplace_url(name: str) -> str:
    return data.MARKETPLACE_URL.format(query=marketplace_slug(name))


def _section(title: str, names: list[str], with_links: bool = False) -> list[str]:
    header = f"{title} ({len(names)})"
    lines = [header, "-" * len(header)]
    if not names:
        lines.append("  None found")
    for name in names:
        lines.append(f"  - {name}")
        if with_links:
            lines.append(f"      Search: {search_engine_url(name)}")
            lines.append(f"      Creations: {marketplace_url(name)}")
    lines.append("")
    return lines


def render_report(result: ClassificationResult, input_file: str | Path,
                  data_folder: str | Path, generated: datetime | None = None) -> list[str]:
    generated = generated or datetime.now()
    lines = [
        f"{data.GAME_NAME} Plugin Report",
        f"Generated: {generated.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Input file: {input_file}",
        f"Data folder: {data_folder}",
        "",
    ]
    lines.extend(_section("Official plugins", result.official))
    lines.extend(_section("Managed plugins", result.managed))
    lines.extend(_section("Unmanaged plugins", result.unmanaged, with_links=True))
    return lines


def default_report_path(input_file: str | Path, now: datetime | None = None) -> Path:
    input_file = Path(input_file)
    now = now or datetime.now()
    file_name = sanitize_filename(f"{input_file.stem}_report_{now.strftime('%Y%m%d_%H%M%S')}.txt")
    return input_file.parent / file_name
