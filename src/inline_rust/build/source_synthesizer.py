"""Source Synthesizer.

This module turns the collected state of a compilation unit into the text of
a complete Rust source file and, for units with crate dependencies, the text
of a Cargo.toml manifest.

Design:
    - Source text is the fragments in registration order, one per line
    - No validation; malformed fragments surface as rustc diagnostics
    - The manifest is built as ordered sections of key/value pairs and only
      rendered to TOML text at the end, so values are always escaped
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple, Union

PACKAGE_NAME = "quasiquote"
PACKAGE_VERSION = "0.0.0"
SOURCE_FILE_NAME = f"{PACKAGE_NAME}.rs"
MANIFEST_FILE_NAME = "Cargo.toml"
STATIC_LIB_NAME = f"lib{PACKAGE_NAME}.a"

ManifestValue = Union[str, Sequence[str]]

_TOML_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def toml_string(value: str) -> str:
    """Render a TOML basic string."""
    out = []
    for ch in value:
        if ch in _TOML_ESCAPES:
            out.append(_TOML_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def toml_key(key: str) -> str:
    """Render a TOML key, quoting it unless it is a bare key."""
    if key and all(ch.isascii() and (ch.isalnum() or ch in "-_") for ch in key):
        return key
    return toml_string(key)


def toml_value(value: ManifestValue) -> str:
    if isinstance(value, str):
        return toml_string(value)
    return "[" + ", ".join(toml_string(item) for item in value) + "]"


@dataclass
class ManifestSection:
    """One ``[table]`` of a manifest. Entries keep insertion order."""

    name: str
    entries: List[Tuple[str, ManifestValue]] = field(default_factory=list)

    def set(self, key: str, value: ManifestValue) -> "ManifestSection":
        self.entries.append((key, value))
        return self

    def render(self) -> str:
        lines = [f"[{self.name}]"]
        for key, value in self.entries:
            lines.append(f"{toml_key(key)} = {toml_value(value)}")
        return "\n".join(lines) + "\n"


@dataclass
class ManifestDocument:
    """Ordered collection of manifest sections."""

    sections: List[ManifestSection] = field(default_factory=list)

    def section(self, name: str) -> ManifestSection:
        """Get a section by name, appending it if it doesn't exist yet."""
        for section in self.sections:
            if section.name == name:
                return section
        section = ManifestSection(name)
        self.sections.append(section)
        return section

    def render(self) -> str:
        return "\n".join(section.render() for section in self.sections)


def build_source_text(fragments: Iterable[str]) -> str:
    """
    Build the complete Rust source file from fragments.

    Args:
        fragments: Code fragments in registration order

    Returns:
        Source text with one fragment per line
    """
    return "".join(f"{fragment}\n" for fragment in fragments)


def build_manifest(dependencies: Iterable[Tuple[str, str]]) -> ManifestDocument:
    """
    Build the Cargo.toml document for a unit with crate dependencies.

    The package is a synthetic ``quasiquote`` crate compiled as a static
    library from ``quasiquote.rs``. Every (name, version) pair is listed
    verbatim, duplicates included.

    Args:
        dependencies: Crate (name, version) pairs

    Returns:
        ManifestDocument ready to render
    """
    doc = ManifestDocument()
    doc.section("package").set("name", PACKAGE_NAME).set("version", PACKAGE_VERSION)

    deps = doc.section("dependencies")
    for name, version in dependencies:
        deps.set(name, version)

    doc.section("lib").set("path", SOURCE_FILE_NAME).set("crate-type", ["staticlib"])
    return doc


def build_manifest_text(dependencies: Iterable[Tuple[str, str]]) -> str:
    """Render the Cargo.toml text for the given crate dependencies."""
    return build_manifest(dependencies).render()
