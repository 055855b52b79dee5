import sys
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from ecs.factories.molecules import tier_weights  # noqa: E402


# Target tier odds as the clear count grows
clears = np.arange(0, 31)
weights = np.array([tier_weights(int(n)) for n in clears])

plt.figure(figsize=(7, 4))
plt.stackplot(
    clears,
    weights[:, 0],
    weights[:, 1],
    weights[:, 2],
    labels=["Tier 1 (small)", "Tier 2 (medium)", "Tier 3 (large)"],
    alpha=0.8,
)
plt.xlabel("Molecules cleared")
plt.ylabel("Selection probability")
plt.title("Target tier weights by progress")
plt.legend(loc="upper right")
plt.grid(True)
plt.show()
