"""
Hero tier model.

Classifies the hero roster into five disjoint skill tiers. The pools are
fixed configuration, loaded and validated once at startup.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from dailyroll.constants import TierConstants
from dailyroll.utils.roll_exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Overwatch 2 roster split by how much brain and height the pick deserves
DEFAULT_HERO_TIERS: Dict[str, List[str]] = {
    'hamster': [
        'Wrecking Ball', 'Bastion', 'Winston', 'Torbjörn', 'Junkrat',
        'Orisa', 'Brigitte', 'Hazard', 'Tracer', 'Sombra',
    ],
    'unga': [
        'Reinhardt', 'Roadhog', 'Mauga', 'Reaper', 'Moira',
        'Soldier: 76', 'Symmetra', 'Junker Queen',
    ],
    'normal': [
        'Ana', 'Ashe', 'Baptiste', 'Cassidy', 'D.Va', 'Mei',
        'Pharah', 'Lúcio', 'Ramattra', 'Venture', 'Zarya', 'Juno',
    ],
    'bigbrain': [
        'Zenyatta', 'Sigma', 'Echo', 'Genji', 'Hanzo',
        'Illari', 'Lifeweaver', 'Sojourn', 'Doomfist',
    ],
    'overqualified': ['Mercy', 'Kiriko', 'Widowmaker', 'Freja'],
}


class TierModel:
    """Read-only mapping of tier number (1-5) to a non-empty hero pool."""
    
    def __init__(self, pools: Mapping[str, Sequence[str]]):
        self._pools: Dict[int, Tuple[str, ...]] = self._validate(pools)
    
    @staticmethod
    def _validate(pools: Mapping[str, Sequence[str]]) -> Dict[int, Tuple[str, ...]]:
        missing = [name for name in TierConstants.TIER_NAMES.values() if name not in pools]
        if missing:
            raise ConfigurationError(f"hero tiers missing: {', '.join(missing)}")
        
        validated = {}
        seen = {}
        for tier, name in TierConstants.TIER_NAMES.items():
            raw = pools[name]
            if not isinstance(raw, (list, tuple)) or not all(isinstance(h, str) and h.strip() for h in raw):
                raise ConfigurationError(f"hero tier '{name}' must be a list of hero names")
            heroes = tuple(raw)
            if not heroes:
                raise ConfigurationError(f"hero tier '{name}' is empty")
            for hero in heroes:
                if hero in seen:
                    raise ConfigurationError(
                        f"hero '{hero}' appears in both '{seen[hero]}' and '{name}'"
                    )
                seen[hero] = name
            validated[tier] = heroes
        
        unknown = set(pools) - set(TierConstants.TIER_NAMES.values())
        if unknown:
            logger.warning(f"Ignoring unknown hero tiers: {', '.join(sorted(unknown))}")
        
        return validated
    
    def heroes(self, tier: int) -> Tuple[str, ...]:
        """Return the hero pool for a tier number."""
        try:
            return self._pools[tier]
        except KeyError:
            raise ValueError(f"tier must be 1-5, got {tier}")
    
    def tier_of(self, hero: str) -> Optional[int]:
        for tier, heroes in self._pools.items():
            if hero in heroes:
                return tier
        return None
    
    @classmethod
    def load(cls, path: Optional[str] = None) -> 'TierModel':
        """
        Build the tier model from a JSON file, or the built-in roster.
        
        Args:
            path: Optional JSON file of {tier_name: [hero, ...]}
            
        Raises:
            ConfigurationError: when the file is unreadable or the tiers are invalid
        """
        if not path:
            model = cls(DEFAULT_HERO_TIERS)
        else:
            try:
                pools = json.loads(Path(path).read_text(encoding='utf-8'))
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigurationError(f"cannot read hero tiers from {path}: {e}") from e
            if not isinstance(pools, dict):
                raise ConfigurationError(f"hero tiers in {path} must be a JSON object")
            model = cls(pools)
        
        logger.info(f"Loaded hero tiers: {', '.join(f'{t}={len(h)}' for t, h in model._pools.items())}")
        return model
