"""
Static language table for the context indexer.

Maps file extensions to language identifiers and defines the set of
languages the assistant recognizes. The extension keys double as the
default extension whitelist for file discovery.
"""

EXT_MAP: dict[str, str] = {
    # Python
    ".py": "python",
    # JavaScript / TypeScript
    ".js": "javascript", ".mjs": "javascript", ".cjs": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript", ".mts": "typescript", ".cts": "typescript",
    ".tsx": "tsx",
    ".vue": "vue",
    # Rust / Go
    ".rs": "rust",
    ".go": "go",
    # JVM
    ".java": "java", ".kt": "kotlin", ".kts": "kotlin", ".scala": "scala",
    # Ruby / PHP / Swift / Dart / Lua / R
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".dart": "dart",
    ".lua": "lua",
    ".r": "r", ".R": "r",
    # C / C++ / C#
    ".c": "c", ".h": "c",
    ".cpp": "cpp", ".cc": "cpp", ".cxx": "cpp", ".hpp": "cpp", ".hh": "cpp",
    ".cs": "csharp",
    # Shell
    ".sh": "shell", ".bash": "shell", ".zsh": "shell",
    ".ps1": "powershell", ".psm1": "powershell",
    # Data / config
    ".json": "json",
    ".yaml": "yaml", ".yml": "yaml",
    ".sql": "sql",
    # Infra
    ".tf": "tf", ".hcl": "hcl",
    # Hardware description
    ".sv": "systemverilog", ".svh": "systemverilog", ".vh": "systemverilog",
}

# Language identifiers the downstream assistant accepts in a RelevantDocument
RECOGNIZED_LANGUAGES: frozenset[str] = frozenset(EXT_MAP.values())

# Extensions walked by default when the configuration does not narrow them
DEFAULT_FILE_EXTENSIONS: tuple[str, ...] = tuple(EXT_MAP)
