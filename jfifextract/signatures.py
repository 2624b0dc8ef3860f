"""
Start Marker Database — the byte sequences that open a recoverable image.

DESIGN RATIONALE
────────────────
The extractor splits its input at every occurrence of ONE fixed marker.
Canon PowerShot cameras write JPEG files that start with FF D8 FF E1
(SOI + APP1/EXIF) even though JFIF says FF D8 FF E0 (SOI + APP0), so the
APP1 form is the default and APP0 is offered as a preset.

Exported for the scanner:
  • MarkerInfo     — lightweight dataclass describing a start marker
  • JFIF_APP1      — FF D8 FF E1 (default)
  • JFIF_APP0      — FF D8 FF E0
  • MARKER_PRESETS — name → MarkerInfo, used by the command line
  • parse_marker() — turn a preset name or hex string into marker bytes
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class MarkerInfo:
    """Describes one start-of-image marker."""
    name: str
    header: bytes
    description: str = ""

    @property
    def hex(self) -> str:
        return " ".join(f"{b:02X}" for b in self.header)


# ── JPEG SOI + APP1 (EXIF), PowerShot and most digital cameras ──
JFIF_APP1 = MarkerInfo(
    name="app1", header=b"\xFF\xD8\xFF\xE1",
    description="JPEG (SOI + APP1/EXIF)",
)

# ── JPEG SOI + APP0 (JFIF) ──
JFIF_APP0 = MarkerInfo(
    name="app0", header=b"\xFF\xD8\xFF\xE0",
    description="JPEG (SOI + APP0/JFIF)",
)

DEFAULT_MARKER: bytes = JFIF_APP1.header

MARKER_PRESETS: dict[str, MarkerInfo] = {
    m.name: m for m in (JFIF_APP1, JFIF_APP0)
}


def parse_marker(text: str) -> bytes:
    """
    Resolve a marker given on the command line.

    Accepts a preset name ("app1", "app0") or a hex string such as
    "FFD8FFE1", "ff d8 ff e1" or "0xFFD8FFE1".
    """
    key = text.strip().lower()
    if key in MARKER_PRESETS:
        return MARKER_PRESETS[key].header
    if key.startswith("0x"):
        key = key[2:]
    key = key.replace(" ", "").replace(":", "")
    try:
        marker = bytes.fromhex(key)
    except ValueError as e:
        raise ValueError(f"invalid marker {text!r}: {e}") from e
    if not marker:
        raise ValueError("marker must be at least one byte")
    return marker
