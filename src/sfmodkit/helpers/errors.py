from pathlib import Path


class FileLoggingSetupError(Exception):
    def __init__(self, path: str, message: str = "Couldn't setup file logging") -> None:
        self.path = path
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.message}: '{self.path}'"


class GameNotFoundError(Exception):
    def __init__(self, tried: list[str] | None = None) -> None:
        self.tried = tried or []
        super().__init__(self.tried)

    def __str__(self) -> str:
        msg = "Couldn't find Starfield installation"
        if self.tried:
            msg += f", tried: {', '.join(self.tried)}"
        return msg


class ArchiveNotFoundError(Exception):
    def __init__(self, path: str | Path, message: str = "Archive is missing") -> None:
        self.path = str(path)
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.message}: '{self.path}'"


class UnsupportedArchiveError(Exception):
    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(self.path)

    def __str__(self) -> str:
        return f"Unsupported archive type: '{self.path}'"


class ArchiveReadError(Exception):
    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(self.path)

    def __str__(self) -> str:
        msg = f"Unable to read archive: '{self.path}'"
        if self.reason:
            msg += f" ({self.reason})"
        return msg


class PluginListNotFoundError(Exception):
    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(self.path)

    def __str__(self) -> str:
        msg = f"Plugin list is missing: '{self.path}'"
        if self.reason:
            msg += f" ({self.reason})"
        return msg


class MalformedPluginListError(Exception):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(self.reason)

    def __str__(self) -> str:
        return f"Plugin list is invalid: '{self.path}': {self.reason}"


class ReportWriteError(Exception):
    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(self.path)

    def __str__(self) -> str:
        msg = f"Couldn't write report: '{self.path}'"
        if self.reason:
            msg += f" ({self.reason})"
        return msg


class RegistryUnavailableError(OSError):
    pass
