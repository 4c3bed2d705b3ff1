#!/usr/bin/env python3
import itertools
if(__package__==None or __package__==""):
    from Orbits import Orbits
    from BasicFunctions import triag
else:
    from .Orbits import Orbits
    from .BasicFunctions import triag

class Ket:
    """
    |pq> two-body ket, p and q are orbit indices
    """
    def __init__(self, p, q, orbits):
        self.p = p
        self.q = q
        self.op = orbits.get_orbit(p)
        self.oq = orbits.get_orbit(q)
    def phase(self, J):
        """
        phase from |pq;J> -> |qp;J>
        """
        return -(-1)**( (self.op.j+self.oq.j)//2 - J )
    def get_indices(self):
        return self.p, self.q
    def is_canonical(self):
        return self.p <= self.q
    def __repr__(self):
        return "Ket({:d},{:d})".format(self.p, self.q)

class TwoBodyChannel:
    """
    particle-particle channel, J: total angular momentum, P: parity, Z: (z1+z2)/2
    only pairs a <= b are stored
    """
    def __init__(self,J=None,P=None,Z=None,orbits=None,e2max=None):
        self.J = J
        self.P = P
        self.Z = Z
        self.orbits = orbits
        self.e2max = e2max
        self.orbit1_index = []
        self.orbit2_index = []
        self.phase_from_indices = {}
        self.index_from_indices = {}
        self.number_states = 0
        if( self.J != None and self.P != None and self.Z != None and orbits != None ):
            self._set_two_body_channel()
    def _set_two_body_channel(self):
        orbs = self.orbits
        if(self.e2max==None): self.e2max = 2*orbs.emax
        for oa, ob in itertools.combinations_with_replacement( orbs.orbits, 2 ):
            ia = orbs.get_orbit_index_from_orbit( oa )
            ib = orbs.get_orbit_index_from_orbit( ob )
            if( ia == ib and self.J%2==1 ): continue
            if( oa.e + ob.e > self.e2max ): continue
            if( (oa.z + ob.z) != 2*self.Z ): continue
            if( (-1)**(oa.l + ob.l) != self.P ): continue
            if( triag( oa.j, ob.j, 2*self.J ) ): continue
            self.orbit1_index.append( ia )
            self.orbit2_index.append( ib )
            idx = len( self.orbit1_index )-1
            self.index_from_indices[(ia,ib)] = idx
            self.index_from_indices[(ib,ia)] = idx
            self.phase_from_indices[(ia,ib)] = 1
            if( ia != ib ): self.phase_from_indices[(ib,ia)] = -(-1)**( (oa.j+ob.j)//2 - self.J )
        self.number_states = len( self.orbit1_index )
    def get_number_states(self):
        return self.number_states
    def get_indices(self,idx):
        return self.orbit1_index[idx], self.orbit2_index[idx]
    def get_orbits(self,idx):
        ia, ib = self.get_indices(idx)
        return self.orbits.get_orbit(ia), self.orbits.get_orbit(ib)
    def get_ket(self,idx):
        return Ket(*self.get_indices(idx), self.orbits)
    def get_local_index(self,a,b):
        return self.index_from_indices.get((a,b))
    def get_phase(self,a,b):
        return self.phase_from_indices[(a,b)]
    def has_pair(self,a,b):
        return (a,b) in self.index_from_indices
    def get_JPZ(self):
        return self.J, self.P, self.Z

class TwoBodySpace:
    def __init__(self,orbits=None,e2max=None):
        self.orbits = orbits
        self.e2max = e2max
        self.index_from_JPZ = {}
        self.channels = []
        self.number_channels = 0
        if( self.orbits != None ):
            if( self.e2max == None ): self.e2max = 2*self.orbits.emax
            jmax = max([o.j for o in self.orbits.orbits], default=0)
            for J in range(jmax+1):
                for P in [1,-1]:
                    for Z in [-1,0,1]:
                        channel = TwoBodyChannel(J=J,P=P,Z=Z,orbits=self.orbits,e2max=self.e2max)
                        if( channel.get_number_states() == 0): continue
                        self.channels.append( channel )
                        idx = len(self.channels) - 1
                        self.index_from_JPZ[(J,P,Z)] = idx
            self.number_channels = len(self.channels)
    def get_number_channels(self):
        return self.number_channels
    def get_index(self,*JPZ):
        return self.index_from_JPZ[JPZ]
    def get_channel(self,idx):
        return self.channels[idx]
    def get_channel_from_JPZ(self,*JPZ):
        return self.get_channel( self.get_index(*JPZ) )
    def get_index_from_orbits(self,a,b,J):
        oa = self.orbits.get_orbit(a)
        ob = self.orbits.get_orbit(b)
        return self.get_index(J, (-1)**(oa.l+ob.l), (oa.z+ob.z)//2)
    def print_channels(self):
        print("  Two-body channels list ")
        print("  J,par,  Z, # of states")
        for channel in self.channels:
            J,P,Z = channel.get_JPZ()
            print("{:3d},{:3d},{:3d},{:12d}".format(J,P,Z,channel.get_number_states()))

class TwoBodyChannel_ph:
    """
    particle-hole channel |a b^-1; J>, Z: (z1-z2)/2
    all ordered pairs are stored
    """
    def __init__(self,J=None,P=None,Z=None,orbits=None):
        self.J = J
        self.P = P
        self.Z = Z
        self.orbits = orbits
        self.orbit1_index = []
        self.orbit2_index = []
        self.index_from_indices = {}
        self.number_states = 0
        if( self.J != None and self.P != None and self.Z != None and orbits != None ):
            self._set_two_body_channel()
    def _set_two_body_channel(self):
        orbs = self.orbits
        for oa, ob in itertools.product( orbs.orbits, repeat=2 ):
            if( (oa.z - ob.z) != 2*self.Z ): continue
            if( (-1)**(oa.l + ob.l) != self.P ): continue
            if( triag( oa.j, ob.j, 2*self.J ) ): continue
            ia = orbs.get_orbit_index_from_orbit( oa )
            ib = orbs.get_orbit_index_from_orbit( ob )
            self.orbit1_index.append( ia )
            self.orbit2_index.append( ib )
            self.index_from_indices[(ia,ib)] = len( self.orbit1_index )-1
        self.number_states = len( self.orbit1_index )
    def get_number_states(self):
        return self.number_states
    def get_indices(self,idx):
        return self.orbit1_index[idx], self.orbit2_index[idx]
    def get_local_index(self,a,b):
        return self.index_from_indices.get((a,b))
    def get_JPZ(self):
        return self.J, self.P, self.Z

class TwoBodySpace_ph:
    def __init__(self,orbits=None):
        self.orbits = orbits
        self.index_from_JPZ = {}
        self.channels = []
        self.number_channels = 0
        if( self.orbits != None ):
            jmax = max([o.j for o in self.orbits.orbits], default=0)
            for J in range(jmax+1):
                for P in [1,-1]:
                    for Z in [-1,0,1]:
                        channel = TwoBodyChannel_ph(J=J,P=P,Z=Z,orbits=self.orbits)
                        if( channel.get_number_states() == 0): continue
                        self.channels.append( channel )
                        self.index_from_JPZ[(J,P,Z)] = len(self.channels) - 1
            self.number_channels = len(self.channels)
    def get_number_channels(self):
        return self.number_channels
    def get_index(self,*JPZ):
        return self.index_from_JPZ[JPZ]
    def get_channel(self,idx):
        return self.channels[idx]
    def get_index_from_orbits(self,a,b,J):
        oa = self.orbits.get_orbit(a)
        ob = self.orbits.get_orbit(b)
        return self.get_index(J, (-1)**(oa.l+ob.l), (oa.z-ob.z)//2)
    def print_channels(self):
        print("  Particle-hole channels list ")
        print("  J,par,  Z, # of states")
        for channel in self.channels:
            J,P,Z = channel.get_JPZ()
            print("{:3d},{:3d},{:3d},{:12d}".format(J,P,Z,channel.get_number_states()))

def main():
    orbs = Orbits(emax=2)
    two = TwoBodySpace(orbits=orbs)
    two.print_channels()
    TwoBodySpace_ph(orbits=orbs).print_channels()
if(__name__=="__main__"):
    main()
