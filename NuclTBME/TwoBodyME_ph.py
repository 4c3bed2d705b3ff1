#!/usr/bin/env python3
import numpy as np
if(__package__==None or __package__==""):
    from ModelSpace import ModelSpace
    from BasicFunctions import sixj
    from TwoBodyME import TwoBodyME, Hermiticity, TBMELookupError, SelectionRuleError, from_particle_hole_representation
else:
    from .ModelSpace import ModelSpace
    from .BasicFunctions import sixj
    from .TwoBodyME import TwoBodyME, Hermiticity, TBMELookupError, SelectionRuleError, from_particle_hole_representation

class TwoBodyME_ph:
    """
    Particle-hole coupled matrix elements < a b^-1: J | X | c d^-1: J > of a scalar operator.
    self.two[ch] is the full matrix in the particle-hole channel ch (all orderings of a, b).
    """
    def __init__(self, ms=None, hermiticity=Hermiticity.HERMITIAN, verbose=False):
        self.ms = ms
        self.rankJ = 0
        self.rankT = 0
        self.rankP = 1
        self.hermiticity = hermiticity
        self.verbose = verbose
        self.two = {}
        self.allocated = False
        if( ms != None ): self.allocate()

    def allocate(self):
        if( self.ms == None or self.ms.two_ph == None ): raise ValueError("ModelSpace with particle-hole channels is needed")
        self.two = {}
        two_ph = self.ms.two_ph
        for ch in range(two_ph.get_number_channels()):
            n = two_ph.get_channel(ch).get_number_states()
            self.two[ch] = np.zeros((n,n))
        self.allocated = True
        if(self.verbose): print("Allocated {:d} particle-hole channels".format(len(self.two)))

    def _locate(self, J, a, b, c, d):
        two_ph = self.ms.two_ph
        try:
            chbra = two_ph.get_index_from_orbits(a, b, J)
            chket = two_ph.get_index_from_orbits(c, d, J)
        except KeyError:
            raise TBMELookupError("no particle-hole channel for J={} and orbits ({},{}),({},{})".format(J,a,b,c,d)) from None
        if( chbra != chket ):
            raise SelectionRuleError("particle-hole pairs ({},{}) and ({},{}) are in different channels".format(a,b,c,d))
        channel = two_ph.get_channel(chbra)
        ibra = channel.get_local_index(a,b)
        iket = channel.get_local_index(c,d)
        if( ibra == None or iket == None ):
            raise SelectionRuleError("orbits ({},{}),({},{}) cannot be coupled to J={}".format(a,b,c,d,J))
        return chbra, ibra, iket

    def get_tbme_J(self, J, a, b, c, d):
        ch, i, j = self._locate(J, a, b, c, d)
        return self.two[ch][i,j]

    def set_tbme_J(self, J, a, b, c, d, me):
        ch, i, j = self._locate(J, a, b, c, d)
        self.two[ch][i,j] = me

    def get_matrix(self, ch):
        try:
            return self.two[ch]
        except KeyError:
            raise TBMELookupError("particle-hole channel {} is not allocated".format(ch)) from None

    def erase(self):
        for mat in self.two.values():
            mat.fill(0.0)

    def to_particle_particle(self):
        return from_particle_hole_representation(self)

    @classmethod
    def from_particle_particle(cls, tbme):
        """
        Pandya transformation of a scalar particle-particle operator (*_norm convention)
        X^J_{a b^-1, c d^-1} = - sum_J' (2J'+1) { ja jb J ; jc jd J' } G^J'_{adcb}
        """
        if( not tbme.is_scalar() ): raise SelectionRuleError("Only scalar operators can be transformed")
        target = cls(ms=tbme.ms, hermiticity=tbme.hermiticity, verbose=tbme.verbose)
        two_ph = target.ms.two_ph
        orbits = target.ms.orbits
        for ch, mat in target.two.items():
            channel = two_ph.get_channel(ch)
            J = channel.J
            for ibra in range(channel.get_number_states()):
                a, b = channel.get_indices(ibra)
                oa, ob = orbits.get_orbit(a), orbits.get_orbit(b)
                for iket in range(channel.get_number_states()):
                    c, d = channel.get_indices(iket)
                    oc, od = orbits.get_orbit(c), orbits.get_orbit(d)
                    Jmin = max(abs(oa.j-od.j), abs(oc.j-ob.j))//2
                    Jmax = min(oa.j+od.j, oc.j+ob.j)//2
                    me = 0.0
                    for Jpp in range(Jmin, Jmax+1):
                        if( not tbme.has_tbme_J(Jpp, Jpp, a, d, c, b) ): continue
                        me -= (2*Jpp+1) * sixj(oa.j, ob.j, 2*J, oc.j, od.j, 2*Jpp) * tbme.get_tbme_J_norm(Jpp, Jpp, a, d, c, b)
                    mat[ibra,iket] = me
        return target

def main():
    ms = ModelSpace(emax=1)
    op = TwoBodyME(ms=ms)
    op.set_tbme_J(0, 0, 1, 2, 1, 2, -1.0)
    ph = TwoBodyME_ph.from_particle_particle(op)
    pp = ph.to_particle_particle()
    print(pp.get_tbme_J(0, 0, 1, 2, 1, 2))
if(__name__=="__main__"):
    main()
