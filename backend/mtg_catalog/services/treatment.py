"""
Treatment classification for printings.

Derives the visual treatment flags and the special-foil label from a
printing's frame, border and promo metadata. Pure and deterministic; the
catalog service re-runs it on every printing upsert.
"""
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional

RETRO_FRAME_VERSIONS = frozenset({"1997", "1993"})

# Checked in order; first match wins
PROMO_FOIL_LABELS: tuple[tuple[str, str], ...] = (
    ("galaxyfoil", "Galaxy Foil"),
    ("textured", "Textured Foil"),
    ("etched", "Etched Foil"),
)
INVERTED_FOIL_LABEL = "Phyrexian Foil"

# Sets whose foils carry a set-specific treatment name
SPECIAL_FOIL_SETS: dict[str, str] = {
    "SLD": "Secret Lair Foil",
    "MUL": "Serialized",
    "BRO": "Schematic",
    "DMU": "Stained Glass",
    "NEO": "Neon Ink",
}


@dataclass(frozen=True)
class Treatment:
    """Derived treatment of a printing."""
    is_showcase: bool = False
    is_extended_art: bool = False
    is_borderless: bool = False
    is_retro_frame: bool = False
    is_serialized: bool = False
    special_foil_label: Optional[str] = None

    def as_columns(self) -> dict[str, Any]:
        """Column values for the Printing model."""
        return asdict(self)


def special_foil_label(
    frame_effects: frozenset[str],
    promo_types: frozenset[str],
    set_code: Optional[str],
) -> Optional[str]:
    for promo, label in PROMO_FOIL_LABELS:
        if promo in promo_types:
            return label
    if "inverted" in frame_effects:
        return INVERTED_FOIL_LABEL
    if set_code:
        return SPECIAL_FOIL_SETS.get(set_code.strip().upper())
    return None


def classify_treatment(
    frame_version: Optional[str],
    frame_effects: Optional[Iterable[str]],
    border_color: Optional[str],
    promo_types: Optional[Iterable[str]],
    set_code: Optional[str],
) -> Treatment:
    """
    Classify a printing's treatment from its metadata.

    Args:
        frame_version: Scryfall frame version ("1993", "1997", "2015", ...)
        frame_effects: Frame effects ("showcase", "extendedart", ...)
        border_color: Border color ("black", "borderless", ...)
        promo_types: Promo types ("galaxyfoil", "textured", ...)
        set_code: Set code, matched case-insensitively against SPECIAL_FOIL_SETS

    Returns:
        Treatment flags; all flags are evaluated independently
    """
    effects = frozenset(frame_effects or ())
    promos = frozenset(promo_types or ())

    return Treatment(
        is_showcase="showcase" in effects,
        is_extended_art="extendedart" in effects,
        is_borderless=border_color == "borderless",
        is_retro_frame=frame_version in RETRO_FRAME_VERSIONS,
        is_serialized="serialized" in effects,
        special_foil_label=special_foil_label(effects, promos, set_code),
    )


def classify_printing(printing: Any) -> Treatment:
    """Classify any object exposing the printing metadata attributes."""
    return classify_treatment(
        getattr(printing, "frame_version", None),
        getattr(printing, "frame_effects", None),
        getattr(printing, "border_color", None),
        getattr(printing, "promo_types", None),
        getattr(printing, "set_code", None),
    )
