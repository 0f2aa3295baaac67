import logging
import ntpath
import os
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Protocol

from sfmodkit.game import data
from sfmodkit.helpers.errors import GameNotFoundError, RegistryUnavailableError
from sfmodkit.helpers.parse_ops import clean_registry_path, scan_key_values

logger = logging.getLogger("sfmodkit")


class RegistryHive(Enum):
    LOCAL_MACHINE = "HKLM"
    CURRENT_USER = "HKCU"


class SystemProbe(Protocol):
    """Read-only access to registry and filesystem state.

    Registry methods raise OSError (FileNotFoundError for missing keys or values).
    """

    def list_value_names(self, hive: RegistryHive, key_path: str) -> list[str]: ...

    def list_subkeys(self, hive: RegistryHive, key_path: str) -> list[str]: ...

    def read_value(self, hive: RegistryHive, key_path: str, value_name: str) -> str: ...

    def path_exists(self, path: str) -> bool: ...

    def read_text(self, path: str) -> str: ...


class WindowsSystemProbe:
    def _open(self, hive: RegistryHive, key_path: str):  # noqa: ANN202
        try:
            import winreg
        except ImportError as ex:
            raise RegistryUnavailableError("WinReg unavailable, might be running under another OS") from ex

        root = winreg.HKEY_LOCAL_MACHINE if hive is RegistryHive.LOCAL_MACHINE else winreg.HKEY_CURRENT_USER
        return winreg, winreg.OpenKey(root, key_path, 0, winreg.KEY_READ)

    def list_value_names(self, hive: RegistryHive, key_path: str) -> list[str]:
        winreg, key = self._open(hive, key_path)
        with key:
            value_count = winreg.QueryInfoKey(key)[1]
            return [winreg.EnumValue(key, i)[0] for i in range(value_count)]

    def list_subkeys(self, hive: RegistryHive, key_path: str) -> list[str]:
        winreg, key = self._open(hive, key_path)
        with key:
            subkey_count = winreg.QueryInfoKey(key)[0]
            return [winreg.EnumKey(key, i) for i in range(subkey_count)]

    def read_value(self, hive: RegistryHive, key_path: str, value_name: str) -> str:
        winreg, key = self._open(hive, key_path)
        with key:
            value = winreg.QueryValueEx(key, value_name)[0]
        if not isinstance(value, str):
            raise ValueError(f"Registry value '{value_name}' is not a string")
        return value

    def path_exists(self, path: str) -> bool:
        return bool(path) and os.path.exists(path)

    def read_text(self, path: str) -> str:
        with open(path, encoding="utf-8", errors="replace") as fh:
            return fh.read()


class InstallResolver:
    """One strategy of the install lookup, never raises on missing or broken data."""

    name = "resolver"

    def __init__(self, probe: SystemProbe) -> None:
        self.probe = probe

    def try_resolve(self) -> str | None:
        try:
            result = self._resolve()
        except RegistryUnavailableError as ex:
            logger.debug(f"[{self.name}] {ex}")
            return None
        except FileNotFoundError:
            logger.debug(f"[{self.name}] registry key or file not found")
            return None
        except (OSError, ValueError, UnicodeError) as ex:
            logger.debug(f"[{self.name}] unable to read data: {ex}")
            return None

        if result:
            logger.debug(f"[{self.name}] found: '{result}'")
            return result
        logger.debug(f"[{self.name}] nothing found")
        return None

    def _resolve(self) -> str | None:
        raise NotImplementedError


class ShellCacheResolver(InstallResolver):
    name = "shell cache"

    def __init__(self, probe: SystemProbe, exe_name: str = data.TARGET_EXE) -> None:
        super().__init__(probe)
        self.exe_name = exe_name.lower()

    def candidate_exe_paths(self) -> list[str]:
        # enumeration order of the cache is whatever the registry returns
        value_names = self.probe.list_value_names(RegistryHive.CURRENT_USER, data.SHELL_CACHE_KEY)
        suffix = data.SHELL_CACHE_SUFFIX.lower()
        candidates = []
        for value_name in value_names:
            if (value_name.startswith(data.SHELL_CACHE_RESERVED_PREFIX)
               or value_name in data.SHELL_CACHE_RESERVED_NAMES
               or not value_name.lower().endswith(suffix)):
                continue
            exe_path = value_name[:-len(suffix)]
            # whole file name must match, MyStarfield.exe is a different program
            if ntpath.basename(exe_path).lower() == self.exe_name:
                candidates.append(exe_path)
        return candidates

    def _resolve(self) -> str | None:
        for exe_path in self.candidate_exe_paths():
            if self.probe.path_exists(exe_path):
                return ntpath.dirname(exe_path)
        return None


class InstallerRegistryResolver(InstallResolver):
    name = "installer registry"

    UNINSTALL_ROOTS: tuple[tuple[RegistryHive, str], ...] = (
        (RegistryHive.LOCAL_MACHINE, data.UNINSTALL_KEY),
        (RegistryHive.LOCAL_MACHINE, data.UNINSTALL_KEY_WOW64),
        (RegistryHive.CURRENT_USER, data.UNINSTALL_KEY),
    )

    def __init__(self, probe: SystemProbe, product_name: str = data.GAME_NAME) -> None:
        super().__init__(probe)
        self.product_name = product_name.lower()

    def _read_optional(self, hive: RegistryHive, key_path: str, value_name: str) -> str:
        try:
            return self.probe.read_value(hive, key_path, value_name)
        except (OSError, ValueError):
            return ""

    def _match_entry(self, hive: RegistryHive, entry_path: str) -> str | None:
        display_name = self._read_optional(hive, entry_path, "DisplayName")
        if self.product_name not in display_name.lower():
            return None
        location = clean_registry_path(self._read_optional(hive, entry_path, "InstallLocation"))
        if location and self.probe.path_exists(location):
            return location
        logger.debug(f"[{self.name}] '{display_name}' has no valid install location: '{location}'")
        return None

    def _resolve(self) -> str | None:
        for hive, root in self.UNINSTALL_ROOTS:
            try:
                entries = self.probe.list_subkeys(hive, root)
            except OSError:
                logger.debug(f"[{self.name}] can't read {hive.value}\\{root}")
                continue
            for entry in entries:
                location = self._match_entry(hive, f"{root}\\{entry}")
                if location:
                    return location
        return None


class LibraryManifestResolver(InstallResolver):
    name = "steam library"

    STEAM_KEYS = (data.STEAM_KEY, data.STEAM_KEY_WOW64)

    def __init__(self, probe: SystemProbe,
                 exe_relative_path: str = ntpath.join(data.GAME_DIR_NAME, data.TARGET_EXE)) -> None:
        super().__init__(probe)
        self.exe_relative_path = exe_relative_path

    def find_steam_root(self) -> str | None:
        for key_path in self.STEAM_KEYS:
            try:
                install_path = clean_registry_path(
                    self.probe.read_value(RegistryHive.LOCAL_MACHINE, key_path, data.STEAM_INSTALL_VALUE))
            except (OSError, ValueError):
                continue
            if install_path:
                return install_path
        return None

    def library_roots(self, steam_root: str) -> list[str]:
        """Return library roots listed in the manifest, default Steam library last."""
        roots = []
        manifest_path = ntpath.join(steam_root, *data.STEAM_LIBRARY_MANIFEST)
        try:
            if self.probe.path_exists(manifest_path):
                manifest = self.probe.read_text(manifest_path)
                roots.extend(ntpath.join(lib, *data.STEAM_LIBRARY_SUBDIR)
                             for lib in scan_key_values(manifest, "path") if lib)
        except (OSError, UnicodeError) as ex:
            logger.debug(f"[{self.name}] unable to parse '{manifest_path}': {ex}")

        roots.append(ntpath.join(steam_root, *data.STEAM_LIBRARY_SUBDIR))
        return roots

    def _resolve(self) -> str | None:
        steam_root = self.find_steam_root()
        if not steam_root:
            return None
        for root in self.library_roots(steam_root):
            exe_path = ntpath.join(root, self.exe_relative_path)
            if self.probe.path_exists(exe_path):
                return ntpath.dirname(exe_path)
        return None


class PathProbe(InstallResolver):
    name = "known paths"

    def __init__(self, probe: SystemProbe,
                 candidates: Iterable[str] = data.CANDIDATE_EXE_PATHS) -> None:
        super().__init__(probe)
        self.candidates = list(candidates)

    def _resolve(self) -> str | None:
        for exe_path in self.candidates:
            if self.probe.path_exists(exe_path):
                return ntpath.dirname(exe_path)
        return None


class ResolutionCascade:
    def __init__(self, resolvers: Sequence[InstallResolver]) -> None:
        self.resolvers = list(resolvers)

    def resolve(self) -> str:
        """Return game directory from the first strategy that finds it."""
        for resolver in self.resolvers:
            try:
                result = resolver.try_resolve()
            except Exception:
                logger.warning(f"Unexpected error in '{resolver.name}' lookup", exc_info=True)
                continue
            if result:
                logger.info(f"Game found by {resolver.name}: '{result}'")
                return result
        raise GameNotFoundError([resolver.name for resolver in self.resolvers])


def default_cascade(probe: SystemProbe | None = None,
                    extra_candidates: Iterable[str] = ()) -> ResolutionCascade:
    probe = probe or WindowsSystemProbe()
    return ResolutionCascade([
        ShellCacheResolver(probe),
        InstallerRegistryResolver(probe),
        LibraryManifestResolver(probe),
        PathProbe(probe, [*data.CANDIDATE_EXE_PATHS, *extra_candidates]),
    ])
