#!/usr/bin/env python3
import copy
if(__package__==None or __package__==""):
    from Orbits import Orbits
    from TwoBodySpace import TwoBodySpace, TwoBodySpace_ph, Ket
else:
    from .Orbits import Orbits
    from .TwoBodySpace import TwoBodySpace, TwoBodySpace_ph, Ket

class ModelSpace:
    def __init__(self, emax=None, e2max=None, orbits=None, ph=True):
        self.orbits = None
        self.two = None
        self.two_ph = None
        self.emax = -1
        self.e2max = -1
        self.ph = ph
        if( emax != None ): self.set_modelspace_from_boundaries( emax, e2max=e2max )
        elif( orbits != None ): self.set_modelspace_from_orbits( orbits, e2max=e2max )
    def set_modelspace_from_boundaries( self, emax, e2max=None ):
        self.emax = emax
        self.e2max = e2max
        if(e2max == None): self.e2max=2*self.emax
        self.orbits = Orbits( emax=emax )
        self._set_channels()
    def set_modelspace_from_orbits(self, orbits, e2max=None):
        self.orbits = copy.deepcopy(orbits)
        self.emax = self.orbits.emax
        self.e2max = e2max
        if( self.e2max == None ): self.e2max=2*self.orbits.emax
        self._set_channels()
    def _set_channels(self):
        self.two = TwoBodySpace( orbits=self.orbits, e2max=self.e2max )
        if(self.ph): self.two_ph = TwoBodySpace_ph( orbits=self.orbits )
    def get_number_channels(self):
        return self.two.get_number_channels()
    def get_two_body_channel(self, ch):
        return self.two.get_channel(ch)
    def get_ket(self, a, b):
        return Ket(a, b, self.orbits)
    def print_modelspace_summary(self):
        print(self.orbits.print_orbits())
        self.two.print_channels()
        if(self.two_ph != None): self.two_ph.print_channels()

def main():
    ms = ModelSpace(emax=1)
    ms.print_modelspace_summary()
if(__name__=="__main__"):
    main()
