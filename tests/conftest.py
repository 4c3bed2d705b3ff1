import numpy as np
import pytest

from NuclTBME import ModelSpace, TwoBodyME, Hermiticity


@pytest.fixture(scope="module")
def ms():
    # p0s1, n0s1, p0p1, n0p1, p0p3, n0p3
    return ModelSpace(emax=1)


@pytest.fixture
def orb(ms):
    return ms.orbits.get_orbit_index_from_label


@pytest.fixture
def channel(ms):
    return ms.two.get_index


def fill_random(op, seed=1):
    """Fill every allocated block with random numbers consistent with the hermiticity of op."""
    rng = np.random.default_rng(seed)
    for key, mat in op.two.items():
        values = rng.uniform(-1.0, 1.0, size=mat.shape)
        if key[0] == key[1] and op.is_hermitian():
            values = values + values.T
        elif key[0] == key[1] and op.is_antihermitian():
            values = values - values.T
        mat[:, :] = values
    return op


@pytest.fixture
def random_scalar(ms):
    return fill_random(TwoBodyME(ms=ms))


@pytest.fixture
def random_tensor(ms):
    return fill_random(TwoBodyME(ms=ms, rankJ=1, rankT=1, rankP=-1), seed=7)


@pytest.fixture
def random_tensor_even(ms):
    # rankP=1 keeps both (ch,ch) and off-diagonal blocks
    return fill_random(TwoBodyME(ms=ms, rankJ=1, rankT=1, rankP=1), seed=23)
