"""Types for the runtime module cache."""

from dataclasses import dataclass

# Entry names looked up inside a runtime release archive.
SCRIPT_ENTRY = "carimbo.js"
BINARY_ENTRY = "carimbo.wasm"


@dataclass(frozen=True)
class RuntimeBundle:
    """The script/binary pair extracted from one runtime release.

    Either field is ``b""`` when the release archive lacks that entry.
    """

    script: bytes = b""
    binary: bytes = b""
