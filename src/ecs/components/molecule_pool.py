from dataclasses import dataclass
from typing import Optional, Tuple

from ecs.factories.molecules import Molecule

@dataclass(slots=True)
class MoleculePool:
    """Optional custom target pool; ``None`` means the built-in tiers are used."""
    custom: Optional[Tuple[Molecule, ...]] = None
