#!/usr/bin/env python3
import sys, gzip, enum, numbers
import numpy as np
import pandas as pd
if(__package__==None or __package__==""):
    from ModelSpace import ModelSpace
    from BasicFunctions import sixj, cg, triag, norm_factor
else:
    from .ModelSpace import ModelSpace
    from .BasicFunctions import sixj, cg, triag, norm_factor

class TBMELookupError(KeyError):
    """
    channel pair or matrix cell is not allocated / addressable
    """

class SelectionRuleError(ValueError):
    """
    orbits or quantum numbers inconsistent with the operator rank, parity, or isospin
    """

class ShapeMismatchError(ValueError):
    """
    two operators with different channel structure are combined
    """

class SerializationError(ValueError):
    """
    binary stream inconsistent with the channel structure of the operator
    """

class Hermiticity(enum.Enum):
    HERMITIAN = 1
    ANTIHERMITIAN = -1
    NONHERMITIAN = 0

class TwoBodyME:
    """
    J-coupled two-body matrix elements

    self.two[(chbra,chket)] (chbra >= chket) is a dense matrix of the elements
    < ab:Jab || V || cd:Jcd > between normalized antisymmetrized states with a <= b and c <= d.
    get_tbme/set_tbme work on these stored values, while the *_norm methods return/accept
    sqrt( (1+delta_ab) (1+delta_cd) ) times the stored value.
    For a scalar operator (rankJ=0, rankT=0, rankP=1) only the blocks (ch,ch) exist.
    Sums of operators with different hermiticity are non-hermitian; this is only allowed
    when there are no off-diagonal blocks, since those are stored in one orientation only.
    """
    def __init__(self, ms=None, rankJ=0, rankT=0, rankP=1, hermiticity=Hermiticity.HERMITIAN, verbose=False):
        if( rankP not in (1,-1) ): raise ValueError("rankP has to be 1 or -1")
        if( rankJ < 0 or rankT < 0 ): raise ValueError("rankJ and rankT have to be non-negative")
        if( not isinstance(hermiticity, Hermiticity) ): raise TypeError("hermiticity has to be a Hermiticity")
        self.ms = ms
        self.rankJ = rankJ
        self.rankT = rankT
        self.rankP = rankP
        self.hermiticity = hermiticity
        self.verbose = verbose
        self.two = {}
        self.nChannels = 0
        self.allocated = False
        if( ms != None ): self.allocate()

    def set_options(self, **kwargs):
        if('verbose' in kwargs): self.verbose = kwargs['verbose']
        if('hermiticity' in kwargs): self.set_hermiticity(kwargs['hermiticity'])

    def is_hermitian(self):
        return self.hermiticity == Hermiticity.HERMITIAN
    def is_antihermitian(self):
        return self.hermiticity == Hermiticity.ANTIHERMITIAN
    def is_nonhermitian(self):
        return self.hermiticity == Hermiticity.NONHERMITIAN
    def set_hermiticity(self, hermiticity):
        if( not isinstance(hermiticity, Hermiticity) ): raise TypeError("hermiticity has to be a Hermiticity")
        self.hermiticity = hermiticity
    def set_hermitian(self):
        self.hermiticity = Hermiticity.HERMITIAN
    def set_antihermitian(self):
        self.hermiticity = Hermiticity.ANTIHERMITIAN
    def set_nonhermitian(self):
        self.hermiticity = Hermiticity.NONHERMITIAN

    def is_scalar(self):
        return self.rankJ==0 and self.rankT==0 and self.rankP==1

    def _channels_allowed(self, chbra, chket):
        if( triag( chbra.J, chket.J, self.rankJ )): return False
        if( chbra.P * chket.P * self.rankP != 1): return False
        if( abs(chbra.Z-chket.Z) > self.rankT): return False
        return True

    def _allowed_channel_pairs(self):
        two = self.ms.two
        for ichbra in range(two.get_number_channels()):
            chbra = two.get_channel(ichbra)
            for ichket in range(ichbra+1):
                chket = two.get_channel(ichket)
                if( not self._channels_allowed(chbra, chket) ): continue
                yield ichbra, ichket, chbra, chket

    def allocate(self):
        if( self.ms == None ): raise ValueError("ModelSpace has to be given before allocation")
        if( self.allocated ): self.deallocate()
        self.nChannels = self.ms.two.get_number_channels()
        for ichbra, ichket, chbra, chket in self._allowed_channel_pairs():
            self.two[(ichbra,ichket)] = np.zeros( (chbra.get_number_states(), chket.get_number_states()) )
        self.allocated = True
        if(self.verbose): print("Allocated {:d} channel pairs, {:d} matrix elements".format(len(self.two), self.size()))

    def deallocate(self):
        self.two = {}
        self.allocated = False

    def copy(self):
        """
        independent copy of the matrices, the ModelSpace is shared
        """
        target = TwoBodyME(rankJ=self.rankJ, rankT=self.rankT, rankP=self.rankP, hermiticity=self.hermiticity, verbose=self.verbose)
        target.ms = self.ms
        target.nChannels = self.nChannels
        target.allocated = self.allocated
        target.two = {key: mat.copy() for key, mat in self.two.items()}
        return target

    def get_matrix(self, chbra, chket=None):
        if( chket == None ): chket = chbra
        try:
            return self.two[(chbra,chket)]
        except KeyError:
            raise TBMELookupError("channel pair ({},{}) is not allocated".format(chbra,chket)) from None

    def _get_channel(self, ch):
        if( not 0 <= ch < self.nChannels ): raise TBMELookupError("channel {} does not exist".format(ch))
        return self.ms.two.get_channel(ch)

    def _channel_index(self, J, P, Z):
        try:
            return self.ms.two.get_index(J, P, Z)
        except KeyError:
            raise TBMELookupError("no two-body channel with J={}, P={}, Z={}".format(J,P,Z)) from None

    def _key(self, chbra, chket):
        """
        stored key of the channel pair and the phase from the bra-ket exchange
        """
        if( chbra >= chket ):
            key, phase = (chbra,chket), 1
        else:
            if( self.is_nonhermitian() ):
                raise TBMELookupError("channel pair ({},{}) is not stored for a non-hermitian operator".format(chbra,chket))
            key = (chket,chbra)
            phase = (-1)**( self._get_channel(chket).J - self._get_channel(chbra).J )
            if( self.is_antihermitian() ): phase *= -1
        if( key not in self.two ):
            raise TBMELookupError("channel pair ({},{}) is not allocated".format(chbra,chket))
        return key, phase

    def _cell(self, chbra, chket, ibra, iket):
        """
        stored key, row, column, and phase of < chbra:ibra | V | chket:iket >
        """
        key, phase = self._key(chbra, chket)
        i, j = ibra, iket
        if( key != (chbra,chket) ): i, j = iket, ibra
        mat = self.two[key]
        if( not (0 <= i < mat.shape[0] and 0 <= j < mat.shape[1]) ):
            raise TBMELookupError("matrix indices ({},{}) out of range in channel pair ({},{})".format(ibra,iket,chbra,chket))
        return key, i, j, phase

    def _locate(self, chbra, chket, a, b, c, d):
        self._key(chbra, chket)
        tbc_bra = self._get_channel(chbra)
        tbc_ket = self._get_channel(chket)
        ibra = tbc_bra.get_local_index(a,b)
        iket = tbc_ket.get_local_index(c,d)
        if( ibra == None ):
            raise SelectionRuleError("orbits ({},{}) do not belong to channel {} (J={},P={},Z={})".format(a,b,chbra,*tbc_bra.get_JPZ()))
        if( iket == None ):
            raise SelectionRuleError("orbits ({},{}) do not belong to channel {} (J={},P={},Z={})".format(c,d,chket,*tbc_ket.get_JPZ()))
        key, i, j, phase = self._cell(chbra, chket, ibra, iket)
        phase *= tbc_bra.get_phase(a,b) * tbc_ket.get_phase(c,d)
        return key, i, j, phase

    def _write(self, key, i, j, me, add=False, propagate=True):
        mat = self.two[key]
        diagonal_block = key[0] == key[1]
        if( propagate and diagonal_block and i == j and self.is_antihermitian() and abs(me) > 1.e-16 ):
            raise SelectionRuleError("Diagonal matrix element of an anti-hermitian operator has to be 0")
        if( add ): mat[i,j] += me
        else: mat[i,j] = me
        if( not propagate or not diagonal_block or i == j or self.is_nonhermitian() ): return
        sign = 1
        if( self.is_antihermitian() ): sign = -1
        if( add ): mat[j,i] += sign*me
        else: mat[j,i] = sign*me

    # channel + in-channel basis indices
    def get_tbme_from_mat_indices(self, chbra, chket, ibra, iket):
        key, i, j, phase = self._cell(chbra, chket, ibra, iket)
        return phase * self.two[key][i,j]

    def get_tbme_from_mat_indices_norm(self, chbra, chket, ibra, iket):
        me = self.get_tbme_from_mat_indices(chbra, chket, ibra, iket)
        a, b = self._get_channel(chbra).get_indices(ibra)
        c, d = self._get_channel(chket).get_indices(iket)
        return me * norm_factor(a,b,c,d)

    def set_tbme_from_mat_indices(self, chbra, chket, ibra, iket, me):
        key, i, j, phase = self._cell(chbra, chket, ibra, iket)
        self._write(key, i, j, me*phase)

    def add_to_tbme_from_mat_indices(self, chbra, chket, ibra, iket, me):
        key, i, j, phase = self._cell(chbra, chket, ibra, iket)
        self._write(key, i, j, me*phase, add=True)

    def add_to_tbme_from_mat_indices_nonherm(self, chbra, chket, ibra, iket, me):
        """
        Updates only the addressed cell. The hermitian conjugate is NOT updated;
        the caller has to issue the mirrored update itself.
        """
        key, i, j, phase = self._cell(chbra, chket, ibra, iket)
        self._write(key, i, j, me*phase, add=True, propagate=False)

    # channel + orbit indices
    def get_tbme(self, chbra, chket, a, b, c, d):
        key, i, j, phase = self._locate(chbra, chket, a, b, c, d)
        return phase * self.two[key][i,j]

    def get_tbme_norm(self, chbra, chket, a, b, c, d):
        return self.get_tbme(chbra, chket, a, b, c, d) * norm_factor(a,b,c,d)

    def set_tbme(self, chbra, chket, a, b, c, d, me):
        key, i, j, phase = self._locate(chbra, chket, a, b, c, d)
        self._write(key, i, j, me*phase)

    def set_tbme_norm(self, chbra, chket, a, b, c, d, me):
        self.set_tbme(chbra, chket, a, b, c, d, me / norm_factor(a,b,c,d))

    def add_to_tbme(self, chbra, chket, a, b, c, d, me):
        key, i, j, phase = self._locate(chbra, chket, a, b, c, d)
        self._write(key, i, j, me*phase, add=True)

    def add_to_tbme_nonherm_nonnormalized(self, chbra, chket, a, b, c, d, me):
        """
        Adds the stored-convention value me to the addressed cell only.
        The hermitian conjugate is NOT updated; the caller has to issue the mirrored update itself.
        """
        key, i, j, phase = self._locate(chbra, chket, a, b, c, d)
        self._write(key, i, j, me*phase, add=True, propagate=False)

    # channel + Ket
    def get_tbme_from_kets(self, chbra, chket, bra, ket):
        return self.get_tbme(chbra, chket, bra.p, bra.q, ket.p, ket.q)

    def get_tbme_from_kets_norm(self, chbra, chket, bra, ket):
        return self.get_tbme_norm(chbra, chket, bra.p, bra.q, ket.p, ket.q)

    def set_tbme_from_kets(self, chbra, chket, bra, ket, me):
        self.set_tbme(chbra, chket, bra.p, bra.q, ket.p, ket.q, me)

    def add_to_tbme_from_kets(self, chbra, chket, bra, ket, me):
        self.add_to_tbme(chbra, chket, bra.p, bra.q, ket.p, ket.q, me)

    # explicit quantum numbers
    def _resolve_JPZ(self, Jbra, Pbra, Zbra, Jket, Pket, Zket):
        if( triag( Jbra, Jket, self.rankJ )):
            raise SelectionRuleError("Operator rank mismatch: Jbra={}, Jket={}, rankJ={}".format(Jbra,Jket,self.rankJ))
        if( Pbra * Pket * self.rankP != 1):
            raise SelectionRuleError("Operator parity mismatch: Pbra={}, Pket={}, rankP={}".format(Pbra,Pket,self.rankP))
        if( abs(Zbra-Zket) > self.rankT):
            raise SelectionRuleError("Operator pn mismatch: Zbra={}, Zket={}, rankT={}".format(Zbra,Zket,self.rankT))
        return self._channel_index(Jbra,Pbra,Zbra), self._channel_index(Jket,Pket,Zket)

    def get_tbme_JPZ(self, Jbra, Pbra, Zbra, Jket, Pket, Zket, a, b, c, d):
        chbra, chket = self._resolve_JPZ(Jbra, Pbra, Zbra, Jket, Pket, Zket)
        return self.get_tbme(chbra, chket, a, b, c, d)

    def set_tbme_JPZ(self, Jbra, Pbra, Zbra, Jket, Pket, Zket, a, b, c, d, me):
        chbra, chket = self._resolve_JPZ(Jbra, Pbra, Zbra, Jket, Pket, Zket)
        self.set_tbme(chbra, chket, a, b, c, d, me)

    def add_to_tbme_JPZ(self, Jbra, Pbra, Zbra, Jket, Pket, Zket, a, b, c, d, me):
        chbra, chket = self._resolve_JPZ(Jbra, Pbra, Zbra, Jket, Pket, Zket)
        self.add_to_tbme(chbra, chket, a, b, c, d, me)

    def get_tbme_JPZ_from_kets(self, Jbra, Pbra, Zbra, Jket, Pket, Zket, bra, ket):
        return self.get_tbme_JPZ(Jbra, Pbra, Zbra, Jket, Pket, Zket, bra.p, bra.q, ket.p, ket.q)

    def set_tbme_JPZ_from_kets(self, Jbra, Pbra, Zbra, Jket, Pket, Zket, bra, ket, me):
        self.set_tbme_JPZ(Jbra, Pbra, Zbra, Jket, Pket, Zket, bra.p, bra.q, ket.p, ket.q, me)

    def add_to_tbme_JPZ_from_kets(self, Jbra, Pbra, Zbra, Jket, Pket, Zket, bra, ket, me):
        self.add_to_tbme_JPZ(Jbra, Pbra, Zbra, Jket, Pket, Zket, bra.p, bra.q, ket.p, ket.q, me)

    def _JPZ_from_orbits(self, a, b, c, d):
        orbits = self.ms.orbits
        try:
            oa, ob, oc, od = [orbits.get_orbit(i) for i in (a,b,c,d)]
        except KeyError as e:
            raise TBMELookupError(str(e)) from None
        return (-1)**(oa.l+ob.l), (oa.z+ob.z)//2, (-1)**(oc.l+od.l), (oc.z+od.z)//2

    def get_tbme_J(self, Jbra, Jket, a, b, c, d):
        Pab, Zab, Pcd, Zcd = self._JPZ_from_orbits(a, b, c, d)
        return self.get_tbme_JPZ(Jbra, Pab, Zab, Jket, Pcd, Zcd, a, b, c, d)

    def get_tbme_J_norm(self, Jbra, Jket, a, b, c, d):
        return self.get_tbme_J(Jbra, Jket, a, b, c, d) * norm_factor(a,b,c,d)

    def set_tbme_J(self, Jbra, Jket, a, b, c, d, me):
        Pab, Zab, Pcd, Zcd = self._JPZ_from_orbits(a, b, c, d)
        self.set_tbme_JPZ(Jbra, Pab, Zab, Jket, Pcd, Zcd, a, b, c, d, me)

    def set_tbme_J_norm(self, Jbra, Jket, a, b, c, d, me):
        self.set_tbme_J(Jbra, Jket, a, b, c, d, me / norm_factor(a,b,c,d))

    def add_to_tbme_J(self, Jbra, Jket, a, b, c, d, me):
        Pab, Zab, Pcd, Zcd = self._JPZ_from_orbits(a, b, c, d)
        self.add_to_tbme_JPZ(Jbra, Pab, Zab, Jket, Pcd, Zcd, a, b, c, d, me)

    def get_tbme_J_norm_two_ops(self, other, Jbra, Jket, a, b, c, d):
        return self.get_tbme_J_norm(Jbra, Jket, a, b, c, d), other.get_tbme_J_norm(Jbra, Jket, a, b, c, d)

    def has_tbme_J(self, Jbra, Jket, a, b, c, d):
        """
        False when the element cannot be addressed, e.g. |aa:J> with odd J or a pair truncated by e2max
        """
        try:
            Pab, Zab, Pcd, Zcd = self._JPZ_from_orbits(a, b, c, d)
            chbra, chket = self._resolve_JPZ(Jbra, Pab, Zab, Jket, Pcd, Zcd)
            self._locate(chbra, chket, a, b, c, d)
        except (TBMELookupError, SelectionRuleError):
            return False
        return True

    # monopole
    def _monopole(self, a, b, c, d, getter):
        if( self.rankJ != 0 ): raise SelectionRuleError("Monopole is defined only for rankJ=0 operators")
        try:
            oa, ob, oc, od = [self.ms.orbits.get_orbit(i) for i in (a,b,c,d)]
        except KeyError as e:
            raise TBMELookupError(str(e)) from None
        if( (-1)**(oa.l+ob.l+oc.l+od.l) != self.rankP ): return 0.0
        if( abs(oa.z+ob.z-oc.z-od.z) > 2*self.rankT ): return 0.0
        Jmin = max(abs(oa.j-ob.j), abs(oc.j-od.j))//2
        Jmax = min(oa.j+ob.j, oc.j+od.j)//2
        sumV = 0.0
        for J in range(Jmin, Jmax+1):
            if( not self.has_tbme_J(J, J, a, b, c, d) ): continue
            sumV += getter(J, J, a, b, c, d) * (2*J+1)
        return sumV / ( (oa.j+1)*(ob.j+1) )

    def get_tbme_monopole(self, a, b, c, d):
        return self._monopole(a, b, c, d, self.get_tbme_J)

    def get_tbme_monopole_norm(self, a, b, c, d):
        return self._monopole(a, b, c, d, self.get_tbme_J_norm)

    def get_tbme_monopole_from_kets(self, bra, ket):
        return self.get_tbme_monopole(bra.p, bra.q, ket.p, ket.q)

    # isospin <-> proton-neutron
    def _iso_weights(self, J, T, Tz, a, b):
        """
        channel index and {local index: <ab:J T Tz | (ab)_pn:J>} over the distinct pn states
        """
        orbits = self.ms.orbits
        oa = orbits.get_orbit(a)
        ob = orbits.get_orbit(b)
        same = oa.get_nlj() == ob.get_nlj()
        ch = self._channel_index(J, (-1)**(oa.l+ob.l), Tz)
        tbc = self._get_channel(ch)
        weights = {}
        for za in [-1,1]:
            zb = 2*Tz - za
            if( abs(zb) != 1 ): continue
            if( same and za > zb ): continue
            try:
                ia = orbits.get_isospin_partner_index(a, za)
                ib = orbits.get_isospin_partner_index(b, zb)
            except KeyError:
                raise SelectionRuleError("isospin partner of orbit {} or {} is missing".format(a,b)) from None
            w = cg(1, za, 1, zb, 2*T, 2*Tz)
            if( same and za != zb ):
                w = ( w - (-1)**(oa.j-J) * cg(1, zb, 1, za, 2*T, 2*Tz) ) / np.sqrt(2.0)
            if( abs(w) < 1.e-12 ): continue
            idx = tbc.get_local_index(ia, ib)
            if( idx == None ): continue
            weights[idx] = weights.get(idx, 0.0) + w * tbc.get_phase(ia, ib)
        return ch, weights

    def _check_isospin(self, T, Tz):
        if( T not in (0,1) or abs(Tz) > T ):
            raise SelectionRuleError("Invalid isospin T={}, Tz={}".format(T,Tz))

    def get_iso_tbme_from_pn(self, J, T, Tz, a, b, c, d):
        """
        < ab:J T Tz | V | cd:J T Tz > from the stored proton-neutron matrix elements.
        Only n, l, j of a, b, c, d are used.
        """
        self._check_isospin(T, Tz)
        chbra, wbra = self._iso_weights(J, T, Tz, a, b)
        chket, wket = self._iso_weights(J, T, Tz, c, d)
        me = 0.0
        for ibra, wb in wbra.items():
            for iket, wk in wket.items():
                me += wb * wk * self.get_tbme_from_mat_indices(chbra, chket, ibra, iket)
        return me

    def set_pn_tbme_from_iso(self, J, T, Tz, a, b, c, d, me):
        """
        Sets the T component of the proton-neutron matrix elements, so that
        get_iso_tbme_from_pn(J, T, Tz, a, b, c, d) returns me. Other T components are kept.
        """
        self._check_isospin(T, Tz)
        chbra, wbra = self._iso_weights(J, T, Tz, a, b)
        chket, wket = self._iso_weights(J, T, Tz, c, d)
        nbra = sum([w**2 for w in wbra.values()])
        nket = sum([w**2 for w in wket.values()])
        if( nbra < 1.e-12 or nket < 1.e-12 ):
            raise SelectionRuleError("No proton-neutron state for J={}, T={}, Tz={}".format(J,T,Tz))
        delta = me - self.get_iso_tbme_from_pn(J, T, Tz, a, b, c, d)
        coef = delta / (nbra * nket)
        if( chbra == chket and set(wbra) == set(wket) and not self.is_nonhermitian() ):
            if( self.is_antihermitian() and abs(delta) > 1.e-16 ):
                raise SelectionRuleError("Diagonal isospin matrix element of an anti-hermitian operator has to be 0")
            # both (ibra,iket) and (iket,ibra) are visited in the loop
            for ibra, wb in wbra.items():
                for iket, wk in wket.items():
                    self.add_to_tbme_from_mat_indices_nonherm(chbra, chket, ibra, iket, coef*wb*wk)
            return
        for ibra, wb in wbra.items():
            for iket, wk in wket.items():
                self.add_to_tbme_from_mat_indices(chbra, chket, ibra, iket, coef*wb*wk)

    # whole-store operations
    def scale(self, coef):
        for mat in self.two.values():
            mat *= coef

    def erase(self):
        for mat in self.two.values():
            mat.fill(0.0)

    def symmetrize(self):
        for key, mat in self.two.items():
            if( key[0] != key[1] ): continue
            mat[:,:] = 0.5 * (mat + mat.T)

    def antisymmetrize(self):
        for key, mat in self.two.items():
            if( key[0] != key[1] ): continue
            mat[:,:] = 0.5 * (mat - mat.T)

    def eye(self):
        for key, mat in self.two.items():
            mat.fill(0.0)
            if( key[0] == key[1] ): np.fill_diagonal(mat, 1.0)

    def norm(self):
        nrm = 0.0
        for key, mat in self.two.items():
            J = self.ms.two.get_channel(key[0]).J
            nrm += np.linalg.norm(mat)**2 * (2*J+1)
        return np.sqrt(nrm)

    def dimension(self):
        dim = 0
        for key, mat in self.two.items():
            if( key[0] != key[1] ): continue
            n = mat.shape[0]
            dim += n*(n+1)//2
        return dim

    def size(self):
        return sum([mat.size for mat in self.two.values()])

    def count_nonzero_2bme(self):
        # count independent entries
        counter = 0
        for key, mat in self.two.items():
            if( key[0] == key[1] and not self.is_nonhermitian() ):
                counter += np.count_nonzero( np.abs(np.triu(mat)) > 1.e-10 )
            else:
                counter += np.count_nonzero( np.abs(mat) > 1.e-10 )
        return counter

    def _check_compatible(self, other):
        if( not isinstance(other, TwoBodyME) ): raise TypeError("TwoBodyME is expected, got "+type(other).__name__)
        if( self.ms is not other.ms ): raise ShapeMismatchError("Operators are defined in different model spaces")
        if( (self.rankJ, self.rankT, self.rankP) != (other.rankJ, other.rankT, other.rankP) ):
            raise ShapeMismatchError("Operator ranks differ")
        if( set(self.two.keys()) != set(other.two.keys()) ):
            raise ShapeMismatchError("Channel pairs differ")
        for key, mat in self.two.items():
            if( mat.shape != other.two[key].shape ):
                raise ShapeMismatchError("Matrix dimensions differ in channel pair {}".format(key))

    def _combined_hermiticity(self, other):
        if( self.hermiticity == other.hermiticity ): return self.hermiticity
        if( any([chbra != chket for chbra, chket in self.two.keys()]) ):
            raise ShapeMismatchError("Operators with off-diagonal channel pairs and different hermiticity cannot be combined")
        return Hermiticity.NONHERMITIAN

    def __iadd__(self, other):
        self._check_compatible(other)
        hermiticity = self._combined_hermiticity(other)
        for key, mat in self.two.items():
            mat += other.two[key]
        self.hermiticity = hermiticity
        return self

    def __isub__(self, other):
        self._check_compatible(other)
        hermiticity = self._combined_hermiticity(other)
        for key, mat in self.two.items():
            mat -= other.two[key]
        self.hermiticity = hermiticity
        return self

    def __imul__(self, coef):
        if( not isinstance(coef, numbers.Real) ): return NotImplemented
        self.scale(coef)
        return self

    def __add__(self, other):
        target = self.copy()
        target += other
        return target

    def __sub__(self, other):
        target = self.copy()
        target -= other
        return target

    def __mul__(self, coef):
        if( not isinstance(coef, numbers.Real) ): return NotImplemented
        target = self.copy()
        target.scale(coef)
        return target

    __rmul__ = __mul__

    def __truediv__(self, coef):
        return self.__mul__(1/coef)

    def __neg__(self):
        return self.__mul__(-1.0)

    # serialization
    def _expected_shapes(self):
        return [((ichbra,ichket), (chbra.get_number_states(), chket.get_number_states())) \
                for ichbra, ichket, chbra, chket in self._allowed_channel_pairs()]

    def write_binary(self, fp):
        """
        number of channel pairs, then for each pair (sorted):
        chbra, chket, nrow, ncol (int32) and the matrix (float64, row-major), little endian
        """
        keys = sorted(self.two.keys())
        fp.write(np.array([len(keys)], dtype='<i4').tobytes())
        for key in keys:
            mat = self.two[key]
            fp.write(np.array([*key, *mat.shape], dtype='<i4').tobytes())
            fp.write(np.ascontiguousarray(mat, dtype='<f8').tobytes())
        if(self.verbose): print("Wrote {:d} channel pairs".format(len(keys)))

    def _read_ints(self, fp, n):
        data = fp.read(4*n)
        if( len(data) != 4*n ): raise SerializationError("Unexpected end of stream")
        return [int(x) for x in np.frombuffer(data, dtype='<i4')]

    def read_binary(self, fp):
        if( self.ms == None ): raise ValueError("ModelSpace has to be given before reading")
        expected = self._expected_shapes()
        n = self._read_ints(fp, 1)[0]
        if( n != len(expected) ):
            raise SerializationError("Number of channel pairs: {:d} in stream, {:d} expected".format(n, len(expected)))
        two = {}
        for key, shape in expected:
            chbra, chket, nrow, ncol = self._read_ints(fp, 4)
            if( (chbra,chket) != key ):
                raise SerializationError("Channel pair ({},{}) in stream, {} expected".format(chbra,chket,key))
            if( (nrow,ncol) != shape ):
                raise SerializationError("Dimension ({},{}) in stream, {} expected for channel pair {}".format(nrow,ncol,shape,key))
            data = fp.read(8*nrow*ncol)
            if( len(data) != 8*nrow*ncol ): raise SerializationError("Unexpected end of stream")
            two[key] = np.frombuffer(data, dtype='<f8').reshape(shape).astype(np.float64)
        self.two = two
        self.nChannels = self.ms.two.get_number_channels()
        self.allocated = True
        if(self.verbose): print("Read {:d} channel pairs".format(n))

    def write_binary_file(self, filename):
        if(filename.endswith(".gz")): f = gzip.open(filename, "wb")
        else: f = open(filename, "wb")
        with f:
            self.write_binary(f)

    def read_binary_file(self, filename):
        if(filename.endswith(".gz")): f = gzip.open(filename, "rb")
        else: f = open(filename, "rb")
        with f:
            self.read_binary(f)

    # output
    def print_matrix(self, chbra, chket=None):
        if( chket == None ): chket = chbra
        mat = self.get_matrix(chbra, chket)
        tbc_bra = self.ms.two.get_channel(chbra)
        tbc_ket = self.ms.two.get_channel(chket)
        print("bra: J={:3d} P={:3d} Z={:3d}, ket: J={:3d} P={:3d} Z={:3d}".format(*tbc_bra.get_JPZ(), *tbc_ket.get_JPZ()))
        print(np.array2string(mat, precision=6, suppress_small=True, max_line_width=sys.maxsize))

    def print_all_matrices(self):
        for key in sorted(self.two.keys()):
            self.print_matrix(*key)

    @staticmethod
    def from_particle_hole_representation(tbme_ph):
        return from_particle_hole_representation(tbme_ph)

    def to_DataFrame(self):
        tmp = []
        for key in sorted(self.two.keys()):
            chbra = self.ms.two.get_channel(key[0])
            chket = self.ms.two.get_channel(key[1])
            mat = self.two[key]
            for ibra, iket in zip(*np.nonzero(mat)):
                a, b = chbra.get_indices(ibra)
                c, d = chket.get_indices(iket)
                tmp.append({"a":a, "b":b, "c":c, "d":d, "Jab":chbra.J, "Jcd":chket.J, "2 body":mat[ibra,iket]})
        if(len(tmp)==0): return pd.DataFrame()
        return pd.DataFrame(tmp)

def from_particle_hole_representation(tbme_ph):
    """
    particle-particle operator from the particle-hole (Pandya) representation
    G^J_{abcd} = - sum_J' (2J'+1) { ja jb J ; jc jd J' } X^J'_{a d^-1, c b^-1}
    in the normalized (*_norm) convention.
    """
    if( tbme_ph.rankJ != 0 ): raise SelectionRuleError("Only scalar particle-hole operators can be transformed")
    target = TwoBodyME(ms=tbme_ph.ms, rankJ=tbme_ph.rankJ, rankT=tbme_ph.rankT, rankP=tbme_ph.rankP, hermiticity=tbme_ph.hermiticity)
    orbits = target.ms.orbits
    for (ichbra, ichket), mat in target.two.items():
        chbra = target.ms.two.get_channel(ichbra)
        chket = target.ms.two.get_channel(ichket)
        J = chbra.J
        for ibra in range(chbra.get_number_states()):
            a, b = chbra.get_indices(ibra)
            oa, ob = orbits.get_orbit(a), orbits.get_orbit(b)
            for iket in range(chket.get_number_states()):
                c, d = chket.get_indices(iket)
                oc, od = orbits.get_orbit(c), orbits.get_orbit(d)
                Jmin = max(abs(oa.j-od.j), abs(oc.j-ob.j))//2
                Jmax = min(oa.j+od.j, oc.j+ob.j)//2
                me = 0.0
                for Jph in range(Jmin, Jmax+1):
                    me -= (2*Jph+1) * sixj(oa.j, ob.j, 2*J, oc.j, od.j, 2*Jph) * tbme_ph.get_tbme_J(Jph, a, d, c, b)
                mat[ibra,iket] = me / norm_factor(a,b,c,d)
    return target

def main():
    ms = ModelSpace(emax=1)
    op = TwoBodyME(ms=ms, verbose=True)
    op.set_tbme_J(0, 0, 1, 1, 1, 1, -2.0)
    op.print_all_matrices()
if(__name__=="__main__"):
    main()
