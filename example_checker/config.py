"""
Checker configuration

Settings come from three places, later ones winning:
1. built-in defaults
2. ``[tool.example-checker]`` in ``pyproject.toml`` (or an explicit TOML file)
3. command-line options

    [tool.example-checker]
    max-nesting = 20
    strict = false
    parallelism = 4
    suffixes = [".rakudoc", ".pod6", ".md"]
    executable-languages = ["raku", "perl6"]
    conflicting-flags = [["skip", "must-fail"], ["skip-test", "must-fail"]]

    [tool.example-checker.severity]
    ExcessiveNesting = "error"
"""

import dataclasses
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from example_checker.core.models import Severity, ViolationKind
from example_checker.errors import ConfigError

logger = logging.getLogger(__name__)


TOOL_SECTION = "example-checker"

DEFAULT_MAX_NESTING = 20

DEFAULT_SEVERITIES: dict[ViolationKind, Severity] = {
    ViolationKind.UNMATCHED_DIRECTIVE: Severity.ERROR,
    ViolationKind.UNTERMINATED_BLOCK: Severity.ERROR,
    ViolationKind.MALFORMED_ASSERTION: Severity.ERROR,
    ViolationKind.MISSING_ASSERTION: Severity.ERROR,
    ViolationKind.EMPTY_ASSERTION_AMBIGUOUS: Severity.WARNING,
    ViolationKind.CONFLICTING_FLAGS: Severity.WARNING,
    ViolationKind.EXCESSIVE_NESTING: Severity.WARNING,
    ViolationKind.INCOMPLETE: Severity.ERROR,
    ViolationKind.IO_FAILURE: Severity.ERROR,
}

DEFAULT_CONFLICTING_FLAGS: tuple[tuple[str, str], ...] = (
    ("skip", "must-fail"),
    ("skip-test", "must-fail"),
)

# Sample languages whose statements are expected to print something.
# An empty string stands for "no language given".
DEFAULT_EXECUTABLE_LANGUAGES: frozenset[str] = frozenset({"", "raku", "perl6", "rakudoc"})

DEFAULT_SUFFIXES: tuple[str, ...] = (".rakudoc", ".pod6", ".pod", ".md")

OUTPUT_FORMATS: tuple[str, ...] = ("text", "json")


def default_parallelism() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class CheckerConfig:
    """
    Settings for one run

    Attributes:
        max_nesting: deepest allowed directive nesting
        strict: promote every warning to an error
        parallelism: worker threads used across documents
        severity_overrides: per-kind severity replacing the defaults
        conflicting_flags: flag pairs that must not appear on one sample
        executable_languages: sample languages that need output assertions
        suffixes: file suffixes picked up when scanning directories
        output_format: "text" or "json"
    """
    max_nesting: int = DEFAULT_MAX_NESTING
    strict: bool = False
    parallelism: int = field(default_factory=default_parallelism)
    severity_overrides: dict[ViolationKind, Severity] = field(default_factory=dict)
    conflicting_flags: tuple[tuple[str, str], ...] = DEFAULT_CONFLICTING_FLAGS
    executable_languages: frozenset[str] = DEFAULT_EXECUTABLE_LANGUAGES
    suffixes: tuple[str, ...] = DEFAULT_SUFFIXES
    output_format: str = "text"

    def severity_of(self, kind: ViolationKind) -> Severity:
        """Resolve the severity of ``kind``, applying strict promotion."""
        severity = self.severity_overrides.get(kind, DEFAULT_SEVERITIES[kind])
        if self.strict and severity == Severity.WARNING:
            return Severity.ERROR
        return severity

    def with_overrides(self, **options: Any) -> "CheckerConfig":
        """Return a copy with every non-None option applied."""
        changes = {key: value for key, value in options.items() if value is not None}
        config = dataclasses.replace(self, **changes)
        config.validate()
        return config

    def validate(self) -> None:
        if self.max_nesting < 1:
            raise ConfigError(f"max-nesting must be at least 1, got {self.max_nesting}")
        if self.parallelism < 1:
            raise ConfigError(f"parallelism must be at least 1, got {self.parallelism}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(f"format must be one of {', '.join(OUTPUT_FORMATS)}, got {self.output_format!r}")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "CheckerConfig":
        """
        Build a config from a ``[tool.example-checker]`` table

        Raises:
            ConfigError: unknown key or value of the wrong type
        """
        options: dict[str, Any] = {}
        for key, value in data.items():
            if key == "max-nesting":
                options["max_nesting"] = _expect(key, value, int)
            elif key == "strict":
                options["strict"] = _expect(key, value, bool)
            elif key == "parallelism":
                options["parallelism"] = _expect(key, value, int)
            elif key == "format":
                options["output_format"] = _expect(key, value, str)
            elif key == "suffixes":
                options["suffixes"] = tuple(_expect_strings(key, value))
            elif key == "executable-languages":
                options["executable_languages"] = frozenset(_expect_strings(key, value))
            elif key == "conflicting-flags":
                pairs = _expect(key, value, list)
                if not all(isinstance(p, list) and len(p) == 2 and all(isinstance(n, str) for n in p) for p in pairs):
                    raise ConfigError("conflicting-flags must be a list of [flag, flag] pairs")
                options["conflicting_flags"] = tuple((a, b) for a, b in pairs)
            elif key == "severity":
                options["severity_overrides"] = _parse_severities(_expect(key, value, dict))
            else:
                raise ConfigError(f"Unknown configuration key: {key}")

        config = cls(**options)
        config.validate()
        return config


def _expect(key: str, value: Any, kind: type) -> Any:
    # bool is a subclass of int; don't accept `max-nesting = true`
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"{key} must be of type {kind.__name__}, got {value!r}")
    return value


def _expect_strings(key: str, value: Any) -> list[str]:
    items = _expect(key, value, list)
    if not all(isinstance(item, str) for item in items):
        raise ConfigError(f"{key} must be a list of strings")
    return items


def _parse_severities(table: dict[str, Any]) -> dict[ViolationKind, Severity]:
    overrides: dict[ViolationKind, Severity] = {}
    for name, level in table.items():
        try:
            kind = ViolationKind(name)
        except ValueError:
            raise ConfigError(f"Unknown violation kind in severity table: {name}") from None
        try:
            overrides[kind] = Severity(level)
        except ValueError:
            raise ConfigError(f"Unknown severity for {name}: {level!r}") from None
    return overrides


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def find_pyproject(start: Path) -> Optional[Path]:
    """Find the nearest ``pyproject.toml`` with our tool section."""
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            content = _read_toml(candidate)
            if TOOL_SECTION in content.get("tool", {}):
                return candidate
    return None


def load_config(path: Optional[Path] = None, start: Optional[Path] = None) -> CheckerConfig:
    """
    Load configuration

    Args:
        path: explicit TOML file; either a pyproject with a
            ``[tool.example-checker]`` table or a file holding the keys at
            top level
        start: directory to search upwards from when ``path`` is None

    Returns:
        CheckerConfig (defaults when no config file is found)

    Raises:
        ConfigError: file unreadable or contents invalid
    """
    if path is None:
        path = find_pyproject((start or Path.cwd()).resolve())
        if path is None:
            return CheckerConfig()

    content = _read_toml(path)
    section = content.get("tool", {}).get(TOOL_SECTION)
    if section is None:
        section = {} if path.name == "pyproject.toml" else content
    logger.debug(f"Loaded configuration from {path}")
    return CheckerConfig.from_mapping(section)
