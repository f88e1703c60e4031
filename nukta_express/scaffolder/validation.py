"""Input validation for the create flow.

Each validator returns a ``ValidationResult`` carrying every violation as a
human-readable string, so callers can report all problems at once.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

MAX_NAME_LENGTH = 214

RESERVED_WORDS: frozenset[str] = frozenset(
    {"node_modules", "package", "package.json", "package-lock.json"}
)

# Names npm refuses outright.  ``node_modules`` is covered by RESERVED_WORDS.
_NPM_BLACKLIST: frozenset[str] = frozenset({"favicon.ico"})

_NODE_CORE_MODULES: frozenset[str] = frozenset(
    {
        "assert", "buffer", "child_process", "cluster", "console", "constants",
        "crypto", "dgram", "dns", "domain", "events", "fs", "http", "http2",
        "https", "inspector", "module", "net", "os", "path", "perf_hooks",
        "process", "punycode", "querystring", "readline", "repl", "stream",
        "string_decoder", "sys", "timers", "tls", "trace_events", "tty", "url",
        "util", "v8", "vm", "wasi", "worker_threads", "zlib",
    }
)

# Characters ``encodeURIComponent`` leaves untouched.
_URL_SAFE_RE = re.compile(r"^[A-Za-z0-9\-_.!~*'()]+$")
_SCOPED_RE = re.compile(r"^@([^/]+)/(.+)$")
_SPECIAL_CHARS_RE = re.compile(r"[~'!()*]")


class ValidationResult(BaseModel):
    """Outcome of a validation: ``valid`` is true exactly when ``errors`` is empty."""

    valid: bool
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)


def _npm_name_errors(name: str) -> list[str]:
    """npm's rules for new package names (length and reserved words excluded)."""
    errors: list[str] = []
    if name.startswith("."):
        errors.append("name cannot start with a period")
    if name.startswith("_"):
        errors.append("name cannot start with an underscore")
    if name.strip() != name:
        errors.append("name cannot contain leading or trailing spaces")
    if name.lower() in _NPM_BLACKLIST:
        errors.append(f"{name} is not a valid package name")
    if name.lower() in _NODE_CORE_MODULES:
        errors.append(f"{name} is a core module name")
    if name.lower() != name:
        errors.append("name can no longer contain capital letters")

    last_segment = name.split("/")[-1]
    if _SPECIAL_CHARS_RE.search(last_segment):
        errors.append("name can no longer contain special characters (\"~'!()*\")")

    if not _URL_SAFE_RE.match(name):
        scoped = _SCOPED_RE.match(name)
        if scoped:
            user, package = scoped.groups()
            if package.startswith("."):
                errors.append("name cannot start with a period")
            if _URL_SAFE_RE.match(user) and _URL_SAFE_RE.match(package):
                return errors
        errors.append("name can only contain URL-friendly characters")
    return errors


def validate_project_name(name: str | None) -> ValidationResult:
    """Validate a project (and npm package) name.

    Examples::

        validate_project_name("my-api").valid -> True
        validate_project_name("node_modules").errors
            -> ['"node_modules" is a reserved word and cannot be used as a project name']
    """
    if not name or not name.strip():
        return ValidationResult.from_errors(["Project name is required"])

    errors = _npm_name_errors(name)

    if name.lower() in RESERVED_WORDS:
        errors.append(f'"{name}" is a reserved word and cannot be used as a project name')

    if len(name) > MAX_NAME_LENGTH:
        errors.append(f"Project name cannot be longer than {MAX_NAME_LENGTH} characters")

    return ValidationResult.from_errors(errors)


def validate_port(port: str | int) -> ValidationResult:
    """Validate a TCP port given as text or number."""
    try:
        port_num = int(str(port).strip())
    except ValueError:
        return ValidationResult.from_errors(["Port must be a valid number"])
    if port_num < 1 or port_num > 65535:
        return ValidationResult.from_errors(["Port must be between 1 and 65535"])
    return ValidationResult.from_errors([])


def validate_database_url(url: str | None) -> ValidationResult:
    """Validate a MongoDB connection string."""
    if not url or not url.strip():
        return ValidationResult.from_errors(["Database URL is required"])
    if not url.startswith(("mongodb://", "mongodb+srv://")):
        return ValidationResult.from_errors(
            ["Database URL must be a valid MongoDB connection string"]
        )
    return ValidationResult.from_errors([])
