from __future__ import annotations

"""Registry of the four legacy rulesets, keyed by their wire id."""

from ..errors import UnknownRuleset
from .base import LEGACY_COUNT_FIELDS, Ruleset
from .catch import CatchRuleset
from .mania import ManiaRuleset
from .osu import OsuRuleset
from .taiko import TaikoRuleset

RULESETS: dict[int, Ruleset] = {
    ruleset.ruleset_id: ruleset
    for ruleset in (OsuRuleset(), TaikoRuleset(), CatchRuleset(), ManiaRuleset())
}


def get_ruleset(ruleset_id: int) -> Ruleset:
    ruleset = RULESETS.get(int(ruleset_id))
    if ruleset is None:
        raise UnknownRuleset(ruleset_id)
    return ruleset


__all__ = [
    "LEGACY_COUNT_FIELDS",
    "RULESETS",
    "CatchRuleset",
    "ManiaRuleset",
    "OsuRuleset",
    "Ruleset",
    "TaikoRuleset",
    "get_ruleset",
]
