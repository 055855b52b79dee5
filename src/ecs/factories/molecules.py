"""Target molecule tables and the weighted target selector."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class Molecule:
    name: str
    pattern: str


TIER_ONE_MOLECULES: Tuple[Molecule, ...] = (
    Molecule("ethane", "CC"),
    Molecule("propane", "CCC"),
    Molecule("butane", "CCCC"),
    Molecule("pentane", "CCCCC"),
    Molecule("hexane", "CCCCCC"),
    Molecule("ethanol", "CCO"),
    Molecule("dimethyl ether", "COC"),
    Molecule("diethyl ether", "CCOCC"),
)

TIER_TWO_MOLECULES: Tuple[Molecule, ...] = (
    Molecule("2-methylpropane", "CC(C)C"),
    Molecule("2-methylbutane", "CC(C)CC"),
    Molecule("propan-1-ol", "CCCO"),
    Molecule("2-propanol", "CC(O)C"),
    Molecule("butan-2-ol", "CC(O)CC"),
    Molecule("2-methylpropan-1-ol", "CC(C)CO"),
    Molecule("methoxyethane", "COCC"),
    Molecule("methoxyethanol", "COCCO"),
    Molecule("propoxyethane", "CCCOCC"),
)

TIER_THREE_MOLECULES: Tuple[Molecule, ...] = (
    Molecule("3-methylpentane", "CCC(C)CC"),
    Molecule("2-methylpentane", "CC(C)CCC"),
    Molecule("2,2-dimethylbutane", "CC(C)(C)CC"),
    Molecule("2,3-dimethylbutane", "CC(C)C(C)C"),
    Molecule("3-ethylpentane", "CCC(CC)CC"),
    Molecule("2-methoxy-2-methylpropane", "COC(C)(C)C"),
    Molecule("1-methoxy-2-methylpropane", "COCC(C)C"),
    Molecule("2-ethoxy-2-methylpropane", "CCOC(C)(C)C"),
    Molecule("2-methoxypropan-1-ol", "COC(C)O"),
    Molecule("2-(methoxymethyl)propan-1-ol", "COC(C)CO"),
    Molecule("2-methoxy-2-methylpropan-1-ol", "COC(C)(C)CO"),
    Molecule("2-ethoxyethan-1-ol", "CCOCCO"),
    Molecule("3-methoxy-2-methylbutan-1-ol", "COC(C)CCO"),
    Molecule("2-methoxy-3-methylbutane", "COC(C)CC"),
    Molecule("2-(ethoxymethyl)propan-1-ol", "CCOC(C)CO"),
    Molecule("2-ethoxy-3-methylbutane", "CCOC(C)CC"),
    Molecule("2-ethoxy-2-methylpropan-1-ol", "CCOC(C)(C)CO"),
)

BUILTIN_TIERS: Tuple[Tuple[Molecule, ...], ...] = (
    TIER_ONE_MOLECULES,
    TIER_TWO_MOLECULES,
    TIER_THREE_MOLECULES,
)

FALLBACK_MOLECULE = Molecule("ethane", "CC")


def choose_random(
    pool: Sequence[Molecule],
    previous_name: Optional[str] = None,
    *,
    rng: random.Random | None = None,
) -> Optional[Molecule]:
    """Pick from pool, avoiding ``previous_name`` whenever an alternative exists."""
    if not pool:
        return None
    if len(pool) == 1:
        return pool[0]
    rng = rng or random.Random()
    choice = rng.choice(pool)
    if choice.name != previous_name:
        return choice
    for _ in range(len(pool)):
        choice = rng.choice(pool)
        if choice.name != previous_name:
            return choice
    # Deterministic fallback to the first entry that differs from the previous target.
    for candidate in pool:
        if candidate.name != previous_name:
            return candidate
    return pool[0]


def tier_weights(clear_count: int) -> Tuple[float, float, float]:
    """Probability of drawing from tier one, two and three after ``clear_count`` clears."""
    if clear_count < 2:
        return 1.0, 0.0, 0.0
    if clear_count < 6:
        tier_two = min(0.85, 0.35 + (clear_count - 2) * 0.15)
        return 1.0 - tier_two, tier_two, 0.0
    tier_three = min(0.9, 0.4 + (clear_count - 6) * 0.1)
    tier_two = min(0.7, 0.3 + (clear_count - 6) * 0.08)
    tier_two = min(tier_two, 1.0 - tier_three)
    return max(0.0, 1.0 - tier_three - tier_two), tier_two, tier_three


def select_target(
    clear_count: int,
    previous_name: Optional[str] = None,
    custom_pool: Optional[Sequence[Molecule]] = None,
    *,
    rng: random.Random | None = None,
    tiers: Sequence[Sequence[Molecule]] = BUILTIN_TIERS,
) -> Molecule:
    """Choose the next target molecule.

    A non-empty custom pool replaces the built-in tiers entirely. Otherwise the
    tier is drawn with odds that shift towards harder molecules as
    ``clear_count`` grows; an empty tier falls through to the others and, when
    every pool is empty, :data:`FALLBACK_MOLECULE` is returned.
    """
    rng = rng or random.Random()
    if custom_pool:
        return choose_random(custom_pool, previous_name, rng=rng) or custom_pool[0]

    tier_one, tier_two, tier_three = (tuple(t) for t in tiers)

    if clear_count < 2:
        order = (tier_one, tier_two, tier_three)
    elif clear_count < 6:
        _, tier_two_chance, _ = tier_weights(clear_count)
        if rng.random() < tier_two_chance:
            order = (tier_two, tier_one, tier_three)
        else:
            order = (tier_one, tier_two, tier_three)
    else:
        _, tier_two_chance, tier_three_chance = tier_weights(clear_count)
        roll = rng.random()
        if roll < tier_three_chance:
            primary = tier_three
        elif roll < tier_three_chance + tier_two_chance:
            primary = tier_two
        else:
            primary = tier_one
        order = (primary, tier_three, tier_two, tier_one)

    for pool in order:
        candidate = choose_random(pool, previous_name, rng=rng)
        if candidate is not None:
            return candidate
    return FALLBACK_MOLECULE

