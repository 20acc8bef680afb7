"""Turn free-form model replies into meal suggestions.

Model output is unreliable: it may arrive wrapped in a ```json fence, in a bare
``` fence, or after a sentence of prose. The parser strips those wrappers and
then parses strictly. Malformed JSON is never repaired.

Parsing happens in two stages:

* :meth:`GenerativeResponseParser.try_parse` yields the raw JSON array and
  accepts any syntactically valid array.
* :func:`validate_meals` converts array entries into :class:`MealSuggestion`
  objects, either strictly (any bad entry fails the whole reply) or leniently
  (bad entries are dropped and logged).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Literal, Sequence, Union

from pydantic import ValidationError

from swipechef.meals.errors import UnparseableResponseError
from swipechef.models.meals import MealSuggestion

logger = logging.getLogger(__name__)

_LABELED_FENCE_RE = re.compile(r"```json\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_BARE_FENCE_RE = re.compile(r"^\s*```\s*|\s*```\s*$")

DIAGNOSTIC_PREVIEW_CHARS = 500

ErrorKind = Literal["syntax", "not_array", "schema"]


@dataclass(frozen=True)
class ParseOk:
    items: List[Any]
    ok: Literal[True] = True


@dataclass(frozen=True)
class ParseErr:
    kind: ErrorKind
    diagnostic: str
    raw_text: str = field(repr=False)
    ok: Literal[False] = False

    def to_exception(self) -> UnparseableResponseError:
        return UnparseableResponseError(
            f"Unparseable meal suggestion response ({self.kind}): {self.diagnostic}",
            raw_text=self.raw_text,
            kind=self.kind,
        )


ParseOutcome = Union[ParseOk, ParseErr]


def strip_fences(text: str) -> str:
    """Remove markdown fences around an embedded JSON payload."""

    candidate = text or ""
    if "```json" in candidate.lower():
        match = _LABELED_FENCE_RE.search(candidate)
        if match:
            candidate = match.group(1).strip()
    # Second pass for replies wrapped in an unlabeled fence.
    return _BARE_FENCE_RE.sub("", candidate).strip()


def _locate_array(text: str) -> str:
    if not text or text[0] in "[{":
        return text
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text


def preview(text: str, limit: int = DIAGNOSTIC_PREVIEW_CHARS) -> str:
    """Single-line, length-bounded rendering of raw model text for logs."""

    flattened = (text or "").strip().replace("\n", " ")
    if len(flattened) > limit:
        return flattened[:limit] + "...(truncated)"
    return flattened


class GenerativeResponseParser:
    """Extract a JSON array from raw model text."""

    def try_parse(self, raw_text: str) -> ParseOutcome:
        payload = _locate_array(strip_fences(raw_text))
        try:
            parsed = json.loads(payload)
        except (json.JSONDecodeError, TypeError) as exc:
            return ParseErr(kind="syntax", diagnostic=str(exc), raw_text=raw_text)
        if not isinstance(parsed, list):
            return ParseErr(
                kind="not_array",
                diagnostic=f"expected a JSON array, got {type(parsed).__name__}",
                raw_text=raw_text,
            )
        return ParseOk(items=parsed)

    def parse(self, raw_text: str) -> List[Any]:
        outcome = self.try_parse(raw_text)
        if isinstance(outcome, ParseErr):
            raise outcome.to_exception()
        return outcome.items


def validate_meals(
    items: Sequence[Any],
    *,
    raw_text: str = "",
    strict: bool = True,
) -> List[MealSuggestion]:
    """Convert parsed array entries into meal suggestions, preserving order."""

    meals: List[MealSuggestion] = []
    for index, entry in enumerate(items):
        try:
            if not isinstance(entry, dict):
                raise TypeError(f"entry {index} is {type(entry).__name__}, not an object")
            meals.append(MealSuggestion.model_validate(entry))
        except (TypeError, ValidationError) as exc:
            if strict:
                raise UnparseableResponseError(
                    f"Meal suggestion entry {index} does not match the meal schema: {exc}",
                    raw_text=raw_text,
                    kind="schema",
                ) from exc
            logger.warning("Dropping meal suggestion entry %s: %s", index, exc)
    return meals


def parse_meal_suggestions(raw_text: str, *, strict: bool = True) -> List[MealSuggestion]:
    """Parse and validate a model reply in one step."""

    items = GenerativeResponseParser().parse(raw_text)
    return validate_meals(items, raw_text=raw_text, strict=strict)


__all__ = [
    "GenerativeResponseParser",
    "ParseErr",
    "ParseOk",
    "ParseOutcome",
    "parse_meal_suggestions",
    "preview",
    "strip_fences",
    "validate_meals",
]
