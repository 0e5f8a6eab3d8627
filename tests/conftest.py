import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from spring_cloth import Cloth, ClothConfig


@pytest.fixture
def still_config():
    """No gravity, seeded excitation."""
    return ClothConfig(g_on=False, seed=0)


def perturb(cloth: Cloth, scale: float = 0.2, seed: int = 1):
    """Jiggle every non-static point so springs are stretched and compressed."""
    rng = np.random.default_rng(seed)
    free = ~cloth.points.static
    noise = rng.uniform(-scale, scale, size=cloth.points.pos.shape).astype(np.float32)
    cloth.points.pos[free] += noise[free]
    cloth.points.vel[free] = noise[free] * np.float32(2.0)
