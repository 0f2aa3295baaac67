import logging
import os
import platform
import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from sfmodkit.game import data
from sfmodkit.helpers.errors import FileLoggingSetupError
from sfmodkit.helpers.file_ops import read_yaml


class ToolConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data_folder: str | None = None
    extra_official_plugins: list[str] = []
    extra_candidate_paths: list[str] = []

    @field_validator("extra_official_plugins", "extra_candidate_paths", mode="before")
    @classmethod
    def convert_to_list(cls, value: str | list | None) -> list:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @property
    def official_plugins(self) -> set[str]:
        return {*data.OFFICIAL_PLUGINS, *self.extra_official_plugins}


class ToolContext:
    """Configuration and logging state for a single run of the tool."""

    def __init__(self, config_path: str | None = None, debug: bool = False) -> None:
        self.debug = debug
        self.config_path = config_path
        self.os = platform.system()
        self.logger = logging.getLogger(data.LOGGER_NAME)
        self.log_path: str | None = None
        self.config = ToolConfig()

    @staticmethod
    def get_local_config_path() -> str:
        """Directory holding sfmodkit.yaml and sfmodkit.log.

        On Windows it's the folder of the launched script or executable,
        elsewhere `$XDG_CONFIG_HOME/sfmodkit` (`~/.config/sfmodkit` by default).
        """
        if platform.system() == "Windows":
            return str(Path(sys.argv[0]).resolve().parent)
        config_root = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
        return os.path.join(config_root, "sfmodkit")

    def load_config(self) -> ToolConfig:
        if self.config_path:
            config_file = self.config_path
        else:
            config_file = os.path.join(self.get_local_config_path(), data.CONFIG_FILE_NAME)

        if not os.path.exists(config_file):
            if self.config_path:
                self.logger.warning(f"Config file not found, using defaults: '{config_file}'")
            return self.config

        # invalid yaml is returned as None, treated the same as empty config
        raw_config = read_yaml(config_file)
        if raw_config is None:
            return self.config
        if not isinstance(raw_config, dict):
            self.logger.warning(f"Config is not a mapping, using defaults: '{config_file}'")
            return self.config

        try:
            self.config = ToolConfig(**raw_config)
        except ValidationError as ex:
            self.logger.warning(f"Invalid config '{config_file}', using defaults: {ex}")
            return self.config

        self.logger.debug(f"Loaded config: {self.config}")
        return self.config

    def setup_loggers(self, log_dir: str | None = None) -> None:
        self.logger.propagate = False
        self.logger.handlers.clear()
        self.logger.setLevel(logging.DEBUG)
        formatter = logging.Formatter("%(asctime)s: %(levelname)-7s - "
                                      "%(module)-11s - line %(lineno)-4d: %(message)s")

        if self.debug:
            stream_handler = logging.StreamHandler()
            stream_handler.setLevel(logging.DEBUG)
            stream_handler.setFormatter(formatter)
            self.logger.addHandler(stream_handler)

        log_dir = log_dir or self.get_local_config_path()
        self.log_path = os.path.join(log_dir, data.LOG_FILE_NAME)
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(self.log_path, mode="a", encoding="utf-8")
        except OSError as ex:
            raise FileLoggingSetupError(self.log_path, f"Couldn't open log file ({ex.strerror})") from ex

        file_handler.setLevel(logging.DEBUG if self.debug else logging.ERROR)
        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

        self.logger.debug(f"SFModKit {data.OWN_VERSION} is running on {self.os}, loggers initialised")

    def close_loggers(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
