import os
import random

import numpy as np
import pytest
from randomfield.core.config import GridSpec


@pytest.fixture(autouse=True)
def seed_rng() -> None:
    random.seed(0)
    np.random.seed(0)
    os.environ["PYTHONHASHSEED"] = "0"


@pytest.fixture()
def spec_2d() -> GridSpec:
    """5x5 grid on [0, 10]^2, periodic along x only."""
    return GridSpec(
        lower_corner=(0.0, 0.0),
        upper_corner=(10.0, 10.0),
        num_grid_pts=(5, 5),
        periodicity=(True, False),
        num_eigenvalues=3,
        length_scale=1.5,
    )


@pytest.fixture()
def spec_1d() -> GridSpec:
    return GridSpec(
        lower_corner=(0.0,),
        upper_corner=(1.0,),
        num_grid_pts=(16,),
        periodicity=(False,),
        num_eigenvalues=4,
        length_scale=0.3,
    )


@pytest.fixture()
def spec_3d() -> GridSpec:
    return GridSpec(
        lower_corner=(-1.0, -2.0, 0.0),
        upper_corner=(1.0, 2.0, 0.5),
        num_grid_pts=(3, 4, 2),
        periodicity=(True, True, False),
        num_eigenvalues=5,
        length_scale=0.75,
    )
