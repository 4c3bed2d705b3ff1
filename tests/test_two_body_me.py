import numpy as np
import pytest

from NuclTBME import TwoBodyME, Hermiticity
from NuclTBME import TBMELookupError, SelectionRuleError


def test_scalar_allocation(ms):
    op = TwoBodyME(ms=ms)
    assert op.allocated
    assert op.is_scalar()
    assert all([chbra == chket for chbra, chket in op.two.keys()])
    assert len(op.two) == ms.get_number_channels()
    for (ch, _), mat in op.two.items():
        n = ms.get_two_body_channel(ch).get_number_states()
        assert mat.shape == (n, n)
        assert not mat.any()


def test_invalid_ranks(ms):
    with pytest.raises(ValueError):
        TwoBodyME(ms=ms, rankP=0)
    with pytest.raises(ValueError):
        TwoBodyME(ms=ms, rankJ=-1)
    with pytest.raises(TypeError):
        TwoBodyME(ms=ms, hermiticity=1)


def test_tensor_allocation_follows_selection_rules(ms):
    op = TwoBodyME(ms=ms, rankJ=1, rankT=1, rankP=-1)
    for chbra, chket in op.two.keys():
        assert chbra >= chket
        Jb, Pb, Zb = ms.two.get_channel(chbra).get_JPZ()
        Jk, Pk, Zk = ms.two.get_channel(chket).get_JPZ()
        assert abs(Jb-Jk) <= 1 <= Jb+Jk
        assert Pb*Pk == -1
        assert abs(Zb-Zk) <= 1


def test_set_get_and_normalization(ms, channel):
    op = TwoBodyME(ms=ms)
    ch = channel(2, 1, -1)
    op.set_tbme(ch, ch, 3, 5, 5, 5, 0.3)
    assert op.get_tbme(ch, ch, 3, 5, 5, 5) == pytest.approx(0.3)
    assert op.get_tbme_norm(ch, ch, 3, 5, 5, 5) == pytest.approx(np.sqrt(2.0)*0.3)
    # hermitian conjugate
    assert op.get_tbme(ch, ch, 5, 5, 3, 5) == pytest.approx(0.3)
    # exchanged orbits
    assert op.get_tbme(ch, ch, 5, 3, 5, 5) == pytest.approx(-0.3)
    op.set_tbme_norm(ch, ch, 5, 5, 5, 5, 2.0)
    assert op.get_tbme(ch, ch, 5, 5, 5, 5) == pytest.approx(1.0)


def test_set_noncanonical_order(ms, channel):
    op = TwoBodyME(ms=ms)
    ch = channel(2, 1, -1)
    op.set_tbme(ch, ch, 5, 3, 5, 5, 0.4)
    assert op.get_tbme(ch, ch, 3, 5, 5, 5) == pytest.approx(-0.4)
    i = ms.two.get_channel(ch).get_local_index(3, 5)
    j = ms.two.get_channel(ch).get_local_index(5, 5)
    assert op.get_matrix(ch)[i, j] == pytest.approx(-0.4)
    assert op.get_matrix(ch)[j, i] == pytest.approx(-0.4)


def test_add_to_tbme(ms, channel):
    op = TwoBodyME(ms=ms)
    ch = channel(0, 1, -1)
    op.add_to_tbme(ch, ch, 1, 1, 3, 3, 0.5)
    op.add_to_tbme(ch, ch, 3, 3, 1, 1, 0.25)
    assert op.get_tbme(ch, ch, 1, 1, 3, 3) == pytest.approx(0.75)
    assert op.get_tbme(ch, ch, 3, 3, 1, 1) == pytest.approx(0.75)


def test_add_nonherm_updates_single_cell(ms, channel):
    op = TwoBodyME(ms=ms)
    ch = channel(0, 1, -1)
    op.add_to_tbme_nonherm_nonnormalized(ch, ch, 1, 1, 3, 3, 0.5)
    assert op.get_tbme(ch, ch, 1, 1, 3, 3) == pytest.approx(0.5)
    assert op.get_tbme(ch, ch, 3, 3, 1, 1) == 0.0
    op.add_to_tbme_from_mat_indices_nonherm(ch, ch, 2, 1, 1.5)
    assert op.get_tbme_from_mat_indices(ch, ch, 2, 1) == pytest.approx(1.5)
    assert op.get_tbme_from_mat_indices(ch, ch, 1, 2) == 0.0


def test_mat_indices(ms, channel):
    op = TwoBodyME(ms=ms)
    ch = channel(0, 1, -1)
    op.set_tbme_from_mat_indices(ch, ch, 0, 2, 1.2)
    assert op.get_tbme(ch, ch, 1, 1, 5, 5) == pytest.approx(1.2)
    assert op.get_tbme_from_mat_indices(ch, ch, 2, 0) == pytest.approx(1.2)
    assert op.get_tbme_from_mat_indices_norm(ch, ch, 0, 2) == pytest.approx(2.4)
    op.add_to_tbme_from_mat_indices(ch, ch, 0, 2, 0.3)
    assert op.get_tbme_from_mat_indices(ch, ch, 2, 0) == pytest.approx(1.5)
    with pytest.raises(TBMELookupError):
        op.get_tbme_from_mat_indices(ch, ch, 0, 3)


def test_kets(ms, channel):
    op = TwoBodyME(ms=ms)
    ch = channel(1, 1, 0)
    bra = ms.get_ket(1, 2)
    ket = ms.get_ket(3, 4)
    op.set_tbme_from_kets(ch, ch, bra, ket, 0.8)
    assert op.get_tbme_from_kets(ch, ch, ket, bra) == pytest.approx(0.8)
    assert op.get_tbme_from_kets_norm(ch, ch, bra, ket) == pytest.approx(0.8)
    op.add_to_tbme_from_kets(ch, ch, bra, ket, 0.1)
    assert op.get_tbme(ch, ch, 1, 2, 3, 4) == pytest.approx(0.9)


def test_JPZ_and_J_access(ms, channel):
    op = TwoBodyME(ms=ms)
    op.set_tbme_JPZ(1, 1, 0, 1, 1, 0, 1, 2, 1, 2, 0.6)
    ch = channel(1, 1, 0)
    assert op.get_tbme(ch, ch, 1, 2, 1, 2) == pytest.approx(0.6)
    assert op.get_tbme_J(1, 1, 1, 2, 1, 2) == pytest.approx(0.6)
    op.add_to_tbme_J(1, 1, 1, 2, 1, 2, 0.1)
    assert op.get_tbme_JPZ(1, 1, 0, 1, 1, 0, 1, 2, 1, 2) == pytest.approx(0.7)
    op.set_tbme_J_norm(0, 0, 1, 1, 1, 1, -2.0)
    assert op.get_tbme_J(0, 0, 1, 1, 1, 1) == pytest.approx(-1.0)
    assert op.get_tbme_J_norm(0, 0, 1, 1, 1, 1) == pytest.approx(-2.0)
    bra = ms.get_ket(1, 2)
    op.add_to_tbme_JPZ_from_kets(1, 1, 0, 1, 1, 0, bra, bra, 0.3)
    assert op.get_tbme_JPZ_from_kets(1, 1, 0, 1, 1, 0, bra, bra) == pytest.approx(1.0)
    op.set_tbme_JPZ_from_kets(1, 1, 0, 1, 1, 0, bra, bra, 0.0)
    assert op.get_tbme_J(1, 1, 1, 2, 1, 2) == 0.0


def test_two_ops(ms):
    op1 = TwoBodyME(ms=ms)
    op2 = TwoBodyME(ms=ms)
    op1.set_tbme_J(0, 0, 1, 1, 1, 1, 1.0)
    op2.set_tbme_J(0, 0, 1, 1, 1, 1, 3.0)
    assert op1.get_tbme_J_norm_two_ops(op2, 0, 0, 1, 1, 1, 1) == pytest.approx((2.0, 6.0))


def test_selection_rule_errors(ms, channel):
    op = TwoBodyME(ms=ms)
    ch = channel(0, 1, -1)
    with pytest.raises(SelectionRuleError):
        op.get_tbme(ch, ch, 1, 2, 1, 2)
    with pytest.raises(SelectionRuleError):
        op.get_tbme_J(0, 1, 1, 2, 1, 2)
    with pytest.raises(SelectionRuleError):
        op.get_tbme_J(0, 0, 1, 3, 1, 1)
    with pytest.raises(SelectionRuleError):
        op.get_tbme_J(0, 0, 1, 1, 1, 2)
    # |aa:J> with odd J
    with pytest.raises(SelectionRuleError):
        op.get_tbme_J(1, 1, 1, 1, 1, 1)
    assert not op.has_tbme_J(1, 1, 1, 1, 1, 1)
    assert op.has_tbme_J(1, 1, 1, 2, 1, 2)


def test_lookup_errors(ms, channel):
    op = TwoBodyME(ms=ms)
    ch0 = channel(0, 1, -1)
    ch1 = channel(1, 1, 0)
    with pytest.raises(TBMELookupError):
        op.get_tbme(ch1, ch0, 1, 2, 1, 1)
    with pytest.raises(TBMELookupError):
        op.get_matrix(ch1, ch0)
    with pytest.raises(TBMELookupError):
        op.get_tbme_J(0, 0, 1, 1, 1, 7)
    with pytest.raises(TBMELookupError):
        TwoBodyME().get_tbme(0, 0, 1, 1, 1, 1)
    # lookup errors are KeyErrors
    with pytest.raises(KeyError):
        op.get_matrix(ch1, ch0)


def test_antihermitian(ms, channel):
    op = TwoBodyME(ms=ms, hermiticity=Hermiticity.ANTIHERMITIAN)
    ch = channel(0, 1, -1)
    op.set_tbme(ch, ch, 1, 1, 3, 3, 0.5)
    assert op.get_tbme(ch, ch, 3, 3, 1, 1) == pytest.approx(-0.5)
    with pytest.raises(SelectionRuleError):
        op.set_tbme(ch, ch, 1, 1, 1, 1, 0.5)
    op.set_tbme(ch, ch, 1, 1, 1, 1, 0.0)


def test_tensor_mirrored_access(ms, channel):
    op = TwoBodyME(ms=ms, rankJ=1, rankT=1, rankP=-1)
    chA = channel(0, 1, -1)
    chB = channel(1, -1, -1)
    assert chB > chA
    op.set_tbme(chB, chA, 1, 3, 1, 1, 0.7)
    assert op.get_tbme(chA, chB, 1, 1, 1, 3) == pytest.approx(-0.7)
    op.set_tbme(chA, chB, 1, 1, 1, 5, 0.2)
    assert op.get_tbme(chB, chA, 1, 5, 1, 1) == pytest.approx(-0.2)

    op.set_antihermitian()
    assert op.get_tbme(chA, chB, 1, 1, 1, 3) == pytest.approx(0.7)

    op.set_nonhermitian()
    assert op.get_tbme(chB, chA, 1, 3, 1, 1) == pytest.approx(0.7)
    with pytest.raises(TBMELookupError):
        op.get_tbme(chA, chB, 1, 1, 1, 3)


def test_monopole(ms):
    op = TwoBodyME(ms=ms)
    op.set_tbme_J(0, 0, 1, 2, 1, 2, 1.0)
    op.set_tbme_J(1, 1, 1, 2, 1, 2, 2.0)
    assert op.get_tbme_monopole(1, 2, 1, 2) == pytest.approx((1.0 + 3*2.0)/4)
    assert op.get_tbme_monopole_norm(1, 2, 1, 2) == pytest.approx((1.0 + 3*2.0)/4)
    assert op.get_tbme_monopole_from_kets(ms.get_ket(1, 2), ms.get_ket(1, 2)) == pytest.approx(1.75)
    # J=1 is skipped for identical orbits
    op.set_tbme_J(0, 0, 1, 1, 1, 1, 4.0)
    assert op.get_tbme_monopole(1, 1, 1, 1) == pytest.approx(1.0)
    assert op.get_tbme_monopole_norm(1, 1, 1, 1) == pytest.approx(2.0)
    # parity and charge violations
    assert op.get_tbme_monopole(1, 3, 1, 1) == 0.0
    assert op.get_tbme_monopole(1, 2, 1, 1) == 0.0
    with pytest.raises(SelectionRuleError):
        TwoBodyME(ms=ms, rankJ=1, rankP=-1).get_tbme_monopole(1, 1, 1, 3)


def test_hermiticity_flags(ms):
    op = TwoBodyME(ms=ms)
    assert op.is_hermitian()
    op.set_options(hermiticity=Hermiticity.NONHERMITIAN, verbose=True)
    assert op.is_nonhermitian()
    assert op.verbose
    with pytest.raises(TypeError):
        op.set_hermiticity("hermitian")
    op.set_hermitian()
    assert op.is_hermitian()


def test_allocate_and_deallocate(ms):
    op = TwoBodyME()
    with pytest.raises(ValueError):
        op.allocate()
    op.ms = ms
    op.allocate()
    op.set_tbme_J(0, 0, 1, 1, 1, 1, 1.0)
    op.allocate()
    assert op.get_tbme_J(0, 0, 1, 1, 1, 1) == 0.0
    op.deallocate()
    assert not op.allocated
    with pytest.raises(TBMELookupError):
        op.get_tbme_J(0, 0, 1, 1, 1, 1)


def test_to_DataFrame(ms, channel):
    op = TwoBodyME(ms=ms)
    assert op.to_DataFrame().empty
    ch = channel(2, 1, -1)
    op.set_tbme(ch, ch, 3, 5, 5, 5, 0.3)
    df = op.to_DataFrame()
    assert len(df) == 2
    assert list(df.columns) == ["a", "b", "c", "d", "Jab", "Jcd", "2 body"]
    assert set(df["Jab"]) == {2}


def test_print_matrix(ms, channel, capsys):
    op = TwoBodyME(ms=ms)
    op.set_tbme_J(0, 0, 1, 1, 1, 1, 1.0)
    op.print_matrix(channel(0, 1, -1))
    out = capsys.readouterr().out
    assert "J=  0" in out


def test_even_tensor_blocks(ms, channel):
    op = TwoBodyME(ms=ms, rankJ=1, rankT=1, rankP=1)
    ch = channel(1, 1, 0)
    op.set_tbme(ch, ch, 1, 2, 3, 4, 0.4)
    assert op.get_tbme(ch, ch, 3, 4, 1, 2) == pytest.approx(0.4)
    chA = channel(0, 1, 0)
    chB = channel(1, 1, 0)
    assert chB > chA
    op.set_tbme(chB, chA, 1, 2, 1, 2, 0.6)
    assert op.get_tbme(chA, chB, 1, 2, 1, 2) == pytest.approx(-0.6)
    chC = channel(1, 1, -1)
    op.set_tbme(chC, chA, 3, 5, 1, 2, 0.2)
    assert op.get_tbme(chA, chC, 1, 2, 3, 5) == pytest.approx(-0.2)


def test_monopole_unknown_orbit(ms):
    op = TwoBodyME(ms=ms)
    with pytest.raises(TBMELookupError):
        op.get_tbme_monopole(1, 2, 1, 9)
