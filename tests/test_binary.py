import io

import numpy as np
import pytest

from NuclTBME import TwoBodyME, SerializationError


def _dump(op):
    f = io.BytesIO()
    op.write_binary(f)
    return f.getvalue()


def test_round_trip_tensor(ms, random_tensor):
    data = _dump(random_tensor)
    op = TwoBodyME(ms=ms, rankJ=1, rankT=1, rankP=-1)
    op.read_binary(io.BytesIO(data))
    assert sorted(op.two.keys()) == sorted(random_tensor.two.keys())
    for key, mat in op.two.items():
        np.testing.assert_array_equal(mat, random_tensor.two[key])
    assert op.allocated


def test_layout(ms, channel):
    op = TwoBodyME(ms=ms)
    op.set_tbme_J(0, 0, 1, 1, 1, 1, 0.5)
    data = _dump(op)
    assert np.frombuffer(data[:4], dtype='<i4')[0] == len(op.two)
    ch = channel(0, 1, -1)
    assert ch == 0
    chbra, chket, nrow, ncol = np.frombuffer(data[4:20], dtype='<i4')
    assert (chbra, chket, nrow, ncol) == (0, 0, 3, 3)
    assert np.frombuffer(data[20:28], dtype='<f8')[0] == 0.5
    assert len(data) == 4 + 16*len(op.two) + 8*op.size()


def test_mismatch_keeps_store(ms, random_scalar, random_tensor):
    data = _dump(random_scalar)
    before = dict(random_tensor.two)
    with pytest.raises(SerializationError):
        random_tensor.read_binary(io.BytesIO(data))
    assert random_tensor.two.keys() == before.keys()
    for key, mat in random_tensor.two.items():
        assert mat is before[key]


def test_truncated_stream(ms, random_scalar):
    data = _dump(random_scalar)
    op = TwoBodyME(ms=ms)
    with pytest.raises(SerializationError):
        op.read_binary(io.BytesIO(data[:-8]))
    with pytest.raises(SerializationError):
        op.read_binary(io.BytesIO(data[:2]))
    assert op.norm() == 0.0


def test_wrong_shape(ms, random_scalar):
    data = bytearray(_dump(random_scalar))
    # nrow of the first channel pair
    data[12:16] = np.array([4], dtype='<i4').tobytes()
    with pytest.raises(SerializationError):
        TwoBodyME(ms=ms).read_binary(io.BytesIO(bytes(data)))


def test_files(ms, random_scalar, tmp_path):
    for name in ["op.bin", "op.bin.gz"]:
        filename = str(tmp_path / name)
        random_scalar.write_binary_file(filename)
        op = TwoBodyME(ms=ms)
        op.read_binary_file(filename)
        assert (op - random_scalar).norm() == 0.0


def test_round_trip_diagonal_and_offdiagonal(ms, random_tensor_even):
    keys = random_tensor_even.two.keys()
    assert any([chbra == chket for chbra, chket in keys])
    assert any([chbra != chket for chbra, chket in keys])
    op = TwoBodyME(ms=ms, rankJ=1, rankT=1, rankP=1)
    op.read_binary(io.BytesIO(_dump(random_tensor_even)))
    for key, mat in random_tensor_even.two.items():
        np.testing.assert_array_equal(op.two[key], mat)
