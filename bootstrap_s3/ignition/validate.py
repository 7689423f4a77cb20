"""Structural validation of an assembled ignition config.

The checks mirror what the boot-time agent rejects for a v2.2 config: a bad
schema version, malformed or unsupported reference URLs, relative or
duplicated file paths, out-of-range modes, unit files with an unknown type
and drop-ins that systemd would ignore. Findings are either errors (the
config must not be shipped) or warnings (suspicious but accepted).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlparse

from bootstrap_s3.ignition.types import IGNITION_SCHEMA_VERSION, Config, ConfigReference, File, Unit

SUPPORTED_URL_SCHEMES = frozenset({"http", "https", "s3", "tftp", "data"})
UNIT_SUFFIXES = (
    ".service",
    ".socket",
    ".device",
    ".mount",
    ".automount",
    ".swap",
    ".target",
    ".path",
    ".timer",
    ".snapshot",
    ".slice",
    ".scope",
)
MAX_FILE_MODE = 0o7777
SPECIAL_MODE_BITS = 0o7000

_SECTION_LINE = re.compile(r"^\[[^\[\]]+\]$")
_ASSIGNMENT_LINE = re.compile(r"^[A-Za-z0-9_.-]+\s*=")


class EntryKind(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Entry:
    kind: EntryKind
    message: str
    context: str = ""

    def __str__(self) -> str:
        where = f" at {self.context}" if self.context else ""
        return f"{self.kind.value}{where}: {self.message}"


@dataclass(slots=True)
class Report:
    entries: list[Entry] = field(default_factory=list)

    def add_error(self, message: str, context: str = "") -> None:
        self.entries.append(Entry(EntryKind.ERROR, message, context))

    def add_warning(self, message: str, context: str = "") -> None:
        self.entries.append(Entry(EntryKind.WARNING, message, context))

    def is_fatal(self) -> bool:
        return any(entry.kind is EntryKind.ERROR for entry in self.entries)

    @property
    def errors(self) -> list[Entry]:
        return [entry for entry in self.entries if entry.kind is EntryKind.ERROR]

    @property
    def warnings(self) -> list[Entry]:
        return [entry for entry in self.entries if entry.kind is EntryKind.WARNING]

    def __str__(self) -> str:
        return "\n".join(str(entry) for entry in self.entries)


def validate_config(config: Config) -> Report:
    """Run every structural check over ``config`` and collect the findings."""
    report = Report()
    _validate_version(config.ignition.version, report)

    for index, reference in enumerate(config.ignition.config.append):
        _validate_reference(reference, f"$.ignition.config.append.{index}", report)
    if config.ignition.config.replace is not None:
        _validate_reference(config.ignition.config.replace, "$.ignition.config.replace", report)

    seen_paths: set[str] = set()
    for index, file in enumerate(config.storage.files):
        _validate_file(file, f"$.storage.files.{index}", seen_paths, report)

    seen_units: set[str] = set()
    for index, unit in enumerate(config.systemd.units):
        _validate_unit(unit, f"$.systemd.units.{index}", seen_units, report)

    return report


def _validate_version(version: str, report: Report) -> None:
    if not version:
        report.add_error("config version is required", "$.ignition.version")
    elif version != IGNITION_SCHEMA_VERSION:
        report.add_error(
            f"unsupported config version {version!r}, expected {IGNITION_SCHEMA_VERSION}",
            "$.ignition.version",
        )


def _validate_url(source: str, context: str, report: Report) -> None:
    parsed = urlparse(source)
    if parsed.scheme not in SUPPORTED_URL_SCHEMES:
        report.add_error(f"invalid url scheme {parsed.scheme!r}", context)
        return
    if parsed.scheme == "s3" and not parsed.netloc:
        report.add_error("s3 url must name a bucket", context)
    if parsed.scheme == "data" and not source.startswith("data:"):
        report.add_error("malformed data url", context)


def _validate_reference(reference: ConfigReference, context: str, report: Report) -> None:
    if not reference.source:
        report.add_error("config reference source is required", f"{context}.source")
        return
    _validate_url(reference.source, f"{context}.source", report)


def _validate_file(file: File, context: str, seen_paths: set[str], report: Report) -> None:
    if not file.filesystem:
        report.add_error("file does not specify a filesystem", f"{context}.filesystem")

    if not file.path.startswith("/"):
        report.add_error(f"path {file.path!r} is not absolute", f"{context}.path")
    elif file.path in seen_paths:
        report.add_error(f"path {file.path!r} is specified more than once", f"{context}.path")
    seen_paths.add(file.path)

    if file.mode is not None:
        if file.mode < 0 or file.mode > MAX_FILE_MODE:
            report.add_error(f"illegal file mode {file.mode:#o}", f"{context}.mode")
        elif file.mode & SPECIAL_MODE_BITS:
            report.add_warning(f"file mode {file.mode:#o} sets setuid, setgid or sticky bits", f"{context}.mode")

    if file.contents.source:
        _validate_url(file.contents.source, f"{context}.contents.source", report)


def _validate_unit_contents(contents: str, context: str, report: Report) -> None:
    continued = False
    for number, line in enumerate(contents.splitlines(), start=1):
        stripped = line.strip()
        if continued:
            continued = stripped.endswith("\\")
            continue
        if not stripped or stripped.startswith(("#", ";")):
            continue
        if not (_SECTION_LINE.match(stripped) or _ASSIGNMENT_LINE.match(stripped)):
            report.add_error(f"invalid unit content on line {number}: {stripped!r}", context)
        continued = stripped.endswith("\\")


def _validate_unit(unit: Unit, context: str, seen_units: set[str], report: Report) -> None:
    if not unit.name.endswith(UNIT_SUFFIXES):
        report.add_error(f"invalid systemd unit extension in {unit.name!r}", f"{context}.name")
    if unit.name in seen_units:
        report.add_error(f"unit {unit.name!r} is specified more than once", f"{context}.name")
    seen_units.add(unit.name)

    if unit.contents:
        _validate_unit_contents(unit.contents, f"{context}.contents", report)
    elif unit.enabled and not unit.dropins:
        report.add_warning(f"unit {unit.name!r} is enabled but has no contents", f"{context}.contents")

    seen_dropins: set[str] = set()
    for index, dropin in enumerate(unit.dropins):
        dropin_context = f"{context}.dropins.{index}"
        if not dropin.name.endswith(".conf"):
            report.add_error(f"invalid systemd unit dropin extension in {dropin.name!r}", f"{dropin_context}.name")
        if dropin.name in seen_dropins:
            report.add_error(f"dropin {dropin.name!r} is specified more than once", f"{dropin_context}.name")
        seen_dropins.add(dropin.name)
        if dropin.contents:
            _validate_unit_contents(dropin.contents, f"{dropin_context}.contents", report)
