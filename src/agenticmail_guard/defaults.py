"""Default values shared across the guard pipeline."""

# Matched snippets longer than this are cut and suffixed with "..."
DEFAULT_MAX_MATCH_LENGTH = 80

# Mail addressed only to these domains is agent-to-agent traffic and skips DLP
DEFAULT_INTERNAL_DOMAINS: tuple[str, ...] = ("localhost",)

# Attachment content types whose payload is scanned with the text rules.
# Any other "text/*" type is scanned as well.
DEFAULT_SCANNABLE_CONTENT_TYPES: tuple[str, ...] = (
    "text/plain",
    "text/html",
    "text/csv",
    "text/xml",
    "text/markdown",
    "application/json",
    "application/xml",
    "application/yaml",
    "application/x-yaml",
    "application/javascript",
    "application/x-sh",
)

# Fallback when the content type does not qualify (or is missing)
DEFAULT_SCANNABLE_EXTENSIONS: tuple[str, ...] = (
    ".txt",
    ".csv",
    ".json",
    ".xml",
    ".yaml",
    ".yml",
    ".md",
    ".log",
    ".env",
    ".conf",
    ".config",
    ".ini",
    ".sql",
    ".js",
    ".ts",
    ".py",
    ".sh",
    ".html",
    ".htm",
    ".css",
    ".toml",
)
