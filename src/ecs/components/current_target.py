from dataclasses import dataclass

from ecs.factories.molecules import Molecule

@dataclass(slots=True)
class CurrentTarget:
    molecule: Molecule
