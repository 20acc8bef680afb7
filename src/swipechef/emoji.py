"""Map ingredient names to display glyphs for deck cards."""

from __future__ import annotations

from typing import Mapping, Optional

FALLBACK_EMOJI = "🍽️"

# Insertion order is the substring match priority.
DEFAULT_EMOJI_TABLE: dict[str, str] = {
    "apple": "🍎",
    "banana": "🍌",
    "orange": "🍊",
    "lemon": "🍋",
    "strawberry": "🍓",
    "grapes": "🍇",
    "watermelon": "🍉",
    "pineapple": "🍍",
    "mango": "🥭",
    "coconut": "🥥",
    "kiwi": "🥝",
    "tomato": "🍅",
    "eggplant": "🍆",
    "potato": "🥔",
    "carrot": "🥕",
    "corn": "🌽",
    "pepper": "🌶️",
    "garlic": "🧄",
    "onion": "🧅",
    "mushroom": "🍄",
    "broccoli": "🥦",
    "lettuce": "🥬",
    "cucumber": "🥒",
    "avocado": "🥑",
    "bread": "🍞",
    "cheese": "🧀",
    "egg": "🥚",
    "meat": "🥩",
    "chicken": "🍗",
    "bacon": "🥓",
    "fish": "🐟",
    "shrimp": "🍤",
    "rice": "🍚",
    "pasta": "🍝",
    "pizza": "🍕",
    "burger": "🍔",
    "taco": "🌮",
    "burrito": "🌯",
    "sandwich": "🥪",
    "milk": "🥛",
    "coffee": "☕",
    "tea": "🍵",
    "cake": "🍰",
    "cookie": "🍪",
    "chocolate": "🍫",
    "ice": "🧊",
    "salt": "🧂",
    "butter": "🧈",
    "oil": "🫗",
    "honey": "🍯",
    "sugar": "🧁",
    "flour": "🌾",
    "spice": "🌶️",
    "herb": "🌿",
    "sauce": "🥫",
    "soup": "🍲",
    "salad": "🥗",
    "juice": "🧃",
    "water": "💧",
    "wine": "🍷",
    "beer": "🍺",
    "cocktail": "🍹",
}


class EmojiResolver:
    """Resolve a glyph by exact key, then first contained key, then a fallback."""

    def __init__(
        self,
        table: Optional[Mapping[str, str]] = None,
        *,
        fallback: str = FALLBACK_EMOJI,
    ) -> None:
        source = DEFAULT_EMOJI_TABLE if table is None else table
        self._table = {key.lower(): glyph for key, glyph in source.items()}
        self._fallback = fallback

    def resolve(self, name: str) -> str:
        lowered = (name or "").strip().lower()
        if not lowered:
            return self._fallback
        exact = self._table.get(lowered)
        if exact is not None:
            return exact
        for key, glyph in self._table.items():
            if key in lowered:
                return glyph
        return self._fallback


_DEFAULT_RESOLVER = EmojiResolver()


def resolve_emoji(name: str) -> str:
    """Return the display glyph for an ingredient name using the default table."""

    return _DEFAULT_RESOLVER.resolve(name)


__all__ = ["DEFAULT_EMOJI_TABLE", "FALLBACK_EMOJI", "EmojiResolver", "resolve_emoji"]
