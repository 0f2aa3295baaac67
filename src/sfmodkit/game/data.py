OWN_VERSION = "1.0.0"

GAME_NAME = "Starfield"
TARGET_EXE = "Starfield.exe"
GAME_DIR_NAME = "Starfield"

LOGGER_NAME = "sfmodkit"
LOG_FILE_NAME = "sfmodkit.log"
CONFIG_FILE_NAME = "sfmodkit.yaml"

# shell metadata cache, value names look like "C:\Games\Starfield\Starfield.exe.FriendlyAppName"
SHELL_CACHE_KEY = r"Software\Classes\Local Settings\Software\Microsoft\Windows\Shell\MuiCache"
SHELL_CACHE_SUFFIX = ".FriendlyAppName"
SHELL_CACHE_RESERVED_PREFIX = "@"
SHELL_CACHE_RESERVED_NAMES = frozenset({"LangID"})

UNINSTALL_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall"
UNINSTALL_KEY_WOW64 = r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall"

STEAM_KEY = r"SOFTWARE\Valve\Steam"
STEAM_KEY_WOW64 = r"SOFTWARE\WOW6432Node\Valve\Steam"
STEAM_INSTALL_VALUE = "InstallPath"
STEAM_LIBRARY_MANIFEST = ("steamapps", "libraryfolders.vdf")
STEAM_LIBRARY_SUBDIR = ("steamapps", "common")

CANDIDATE_DRIVES = "CDEF"

CANDIDATE_EXE_PATHS: tuple[str, ...] = (
    rf"C:\Program Files (x86)\Steam\steamapps\common\{GAME_DIR_NAME}\{TARGET_EXE}",
    rf"C:\Program Files\Steam\steamapps\common\{GAME_DIR_NAME}\{TARGET_EXE}",
    *(rf"{drive}:\SteamLibrary\steamapps\common\{GAME_DIR_NAME}\{TARGET_EXE}"
      for drive in CANDIDATE_DRIVES),
    *(rf"{drive}:\XboxGames\{GAME_DIR_NAME}\Content\{TARGET_EXE}"
      for drive in CANDIDATE_DRIVES),
)

# relative to the game root
SCRIPTS_ARCHIVE = ("Tools", "ContentResources.zip")
SCRIPTS_DESTINATION = ("Data", "Scripts", "Source")
SCRIPT_EXTENSION = ".psc"

DEFAULT_DATA_FOLDER = rf"C:\Program Files (x86)\Steam\steamapps\common\{GAME_DIR_NAME}\Data"

# exact, case-sensitive names
OFFICIAL_PLUGINS: tuple[str, ...] = (
    "Starfield.esm",
    "Constellation.esm",
    "OldMars.esm",
    "BlueprintShips-Starfield.esm",
    "SFBGS003.esm",
    "SFBGS004.esm",
    "SFBGS006.esm",
    "SFBGS007.esm",
    "SFBGS008.esm",
    "ShatteredSpace.esm",
)

PLUGIN_EXTENSIONS = (".esm", ".esp", ".esl")

SEARCH_ENGINE_URL = "https://www.google.com/search?q=starfield+mod+{query}"
MARKETPLACE_URL = "https://creations.bethesda.net/en/starfield/all?text={query}"
