"""
Core constants and enums for the catalog engine.

This module provides standardized enums for card conditions, finishes,
languages and listing states, along with normalization functions that map
external data (spreadsheets, sync payloads) onto our internal representation.
"""
from enum import Enum
from typing import Optional


class CardCondition(str, Enum):
    """
    Five-point card condition scale used by listings and imports.
    """
    NEAR_MINT = "NM"
    LIGHTLY_PLAYED = "LP"
    MODERATELY_PLAYED = "MP"
    HEAVILY_PLAYED = "HP"
    DAMAGED = "DMG"


class Finish(str, Enum):
    """Physical finish of a printing."""
    NONFOIL = "nonfoil"
    FOIL = "foil"
    ETCHED = "etched"


class ListingStatus(str, Enum):
    """Lifecycle states of a seller listing (owned by the Listings service)."""
    ACTIVE = "active"
    PAUSED = "paused"
    SOLD = "sold"
    CANCELLED = "cancelled"


class CardLanguage(str, Enum):
    """
    Supported card languages.

    Covers all languages in which Magic: The Gathering cards
    have been officially printed.
    """
    ENGLISH = "English"
    JAPANESE = "Japanese"
    GERMAN = "German"
    FRENCH = "French"
    ITALIAN = "Italian"
    SPANISH = "Spanish"
    PORTUGUESE = "Portuguese"
    KOREAN = "Korean"
    CHINESE_SIMPLIFIED = "Chinese Simplified"
    CHINESE_TRADITIONAL = "Chinese Traditional"
    RUSSIAN = "Russian"
    PHYREXIAN = "Phyrexian"


class SortKey(str, Enum):
    """Secondary sort keys accepted by the search engine."""
    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME = "name"
    NEWEST = "newest"
    POPULARITY = "popularity"


class ColorMode(str, Enum):
    """How a color filter is matched against a card's colors."""
    ANY = "any"
    EXACTLY = "exactly"
    AT_LEAST = "at_least"


class Comparator(str, Enum):
    """Numeric comparators for mana value / power / toughness filters."""
    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


class PricingStrategy(str, Enum):
    """Sale price strategies offered to sellers."""
    COMPETITIVE = "competitive"
    MARKET = "market"
    QUICK_SALE = "quick-sale"
    PREMIUM = "premium"
    UNDERCUT = "undercut"
    CUSTOM = "custom"


class MatchStatus(str, Enum):
    """Outcome of resolving an import row against the catalog."""
    MATCHED = "matched"
    NEEDS_REVIEW = "needs_review"


MANA_COLORS = frozenset({"W", "U", "B", "R", "G"})


# Condition normalization mappings from spreadsheets and marketplaces.
# Keys are lowercase; lookups are case-insensitive.
CONDITION_ALIASES: dict[str, CardCondition] = {
    # Near Mint variations
    "nm": CardCondition.NEAR_MINT,
    "near mint": CardCondition.NEAR_MINT,
    "nearmint": CardCondition.NEAR_MINT,
    "near_mint": CardCondition.NEAR_MINT,
    "near mint/mint": CardCondition.NEAR_MINT,
    "nm/m": CardCondition.NEAR_MINT,
    "m": CardCondition.NEAR_MINT,
    "mint": CardCondition.NEAR_MINT,
    # Lightly Played
    "lp": CardCondition.LIGHTLY_PLAYED,
    "lightly played": CardCondition.LIGHTLY_PLAYED,
    "lightlyplayed": CardCondition.LIGHTLY_PLAYED,
    "lightly_played": CardCondition.LIGHTLY_PLAYED,
    "light played": CardCondition.LIGHTLY_PLAYED,
    "sp": CardCondition.LIGHTLY_PLAYED,  # "Slightly Played"
    "slightly played": CardCondition.LIGHTLY_PLAYED,
    "excellent": CardCondition.LIGHTLY_PLAYED,
    "ex": CardCondition.LIGHTLY_PLAYED,
    # Moderately Played
    "mp": CardCondition.MODERATELY_PLAYED,
    "moderately played": CardCondition.MODERATELY_PLAYED,
    "moderatelyplayed": CardCondition.MODERATELY_PLAYED,
    "moderately_played": CardCondition.MODERATELY_PLAYED,
    "played": CardCondition.MODERATELY_PLAYED,
    "good": CardCondition.MODERATELY_PLAYED,
    "gd": CardCondition.MODERATELY_PLAYED,
    # Heavily Played
    "hp": CardCondition.HEAVILY_PLAYED,
    "heavily played": CardCondition.HEAVILY_PLAYED,
    "heavilyplayed": CardCondition.HEAVILY_PLAYED,
    "heavily_played": CardCondition.HEAVILY_PLAYED,
    "poor": CardCondition.HEAVILY_PLAYED,
    # Damaged
    "dmg": CardCondition.DAMAGED,
    "damaged": CardCondition.DAMAGED,
    "d": CardCondition.DAMAGED,
    "po": CardCondition.DAMAGED,
}


# Language normalization mappings; keys are lowercase.
LANGUAGE_ALIASES: dict[str, CardLanguage] = {
    # ISO 639-1 / Scryfall codes
    "en": CardLanguage.ENGLISH,
    "ja": CardLanguage.JAPANESE,
    "jp": CardLanguage.JAPANESE,
    "de": CardLanguage.GERMAN,
    "fr": CardLanguage.FRENCH,
    "it": CardLanguage.ITALIAN,
    "es": CardLanguage.SPANISH,
    "pt": CardLanguage.PORTUGUESE,
    "ko": CardLanguage.KOREAN,
    "zhs": CardLanguage.CHINESE_SIMPLIFIED,
    "zht": CardLanguage.CHINESE_TRADITIONAL,
    "ru": CardLanguage.RUSSIAN,
    "ph": CardLanguage.PHYREXIAN,

    # Common variations
    "chinese": CardLanguage.CHINESE_SIMPLIFIED,
    "chinese (simplified)": CardLanguage.CHINESE_SIMPLIFIED,
    "chinese (traditional)": CardLanguage.CHINESE_TRADITIONAL,
    "simplified chinese": CardLanguage.CHINESE_SIMPLIFIED,
    "traditional chinese": CardLanguage.CHINESE_TRADITIONAL,
}
# Full names map to themselves
LANGUAGE_ALIASES.update({lang.value.lower(): lang for lang in CardLanguage})


def normalize_condition(condition: Optional[str]) -> CardCondition:
    """
    Normalize any condition string to the five-point CardCondition scale.

    Args:
        condition: Raw condition string from external source

    Returns:
        Normalized CardCondition enum value

    Examples:
        >>> normalize_condition("Near Mint")
        <CardCondition.NEAR_MINT: 'NM'>
        >>> normalize_condition("lightly played")
        <CardCondition.LIGHTLY_PLAYED: 'LP'>
        >>> normalize_condition(None)
        <CardCondition.NEAR_MINT: 'NM'>
    """
    if not condition:
        return CardCondition.NEAR_MINT
    return CONDITION_ALIASES.get(condition.lower().strip(), CardCondition.NEAR_MINT)


def normalize_language(language: Optional[str]) -> CardLanguage:
    """
    Normalize any language string to our standard CardLanguage enum.

    Unknown values fall back to English.
    """
    if not language:
        return CardLanguage.ENGLISH
    return LANGUAGE_ALIASES.get(language.lower().strip(), CardLanguage.ENGLISH)
