#!/usr/bin/env python3
import re

_labels_orbital_angular_momentum = ('s','p','d','f','g','h','i','k','l','m','n',\
        'o','q','r','t','u','v','w','x','y','z')

class Orbit:
    """
    single-particle orbit, j and z are doubled (z=-1: proton, z=1: neutron)
    """
    def __init__(self):
        self.n = -1
        self.l = -1
        self.j = -1
        self.z = -1
        self.e = -1
    def set_orbit(self, *nljz):
        self.n, self.l, self.j, self.z = nljz
        self.e = 2*self.n+self.l
    def get_nljz(self):
        return (self.n, self.l, self.j, self.z)
    def get_nlj(self):
        return (self.n, self.l, self.j)

class Orbits:
    def __init__(self, emax=None, lmax=None, shell_model_space=None, verbose=False):
        self.nljz_idx = {}
        self.orbits  = []
        self.norbs = 0
        self.emax = -1
        self.lmax = -1
        self.verbose=verbose
        if( emax == None and lmax==None and shell_model_space==None): return
        self.set_orbits(emax=emax,lmax=lmax,shell_model_space=shell_model_space)
    def add_orbit(self,*nljz):
        if(nljz in self.nljz_idx):
            if(self.verbose): print("The orbit ({:3d},{:3d},{:3d},{:3d}) is already there.".format(*nljz) )
            return
        if(nljz[2]%2 != 1): raise ValueError("j has to be given doubled (odd integer)")
        if(abs(nljz[3]) != 1): raise ValueError("z has to be -1 (proton) or 1 (neutron)")
        self.norbs = len(self.orbits)+1
        idx = self.norbs
        self.nljz_idx[nljz] = idx
        orb = Orbit()
        orb.set_orbit(*nljz)
        self.orbits.append( orb )
        self.emax = max(self.emax, 2*nljz[0]+nljz[1])
        self.lmax = max(self.lmax, nljz[1])
    def _parse_label(self,string):
        """
        string format should be like p0s1 => proton 0s1/2
        """
        pn = string[0]
        if( pn == "p" ): z=-1
        elif( pn == "n" ): z=1
        else: raise ValueError("parse error in orbit label: "+ string )
        nlj_str = string[1:]
        l_str = re.findall('[a-z]+',nlj_str)[0]
        n_str, j_str = re.findall('[0-9]+',nlj_str)
        l = _labels_orbital_angular_momentum.index(l_str)
        return int(n_str),l,int(j_str),z
    def add_orbit_from_label(self,string):
        self.add_orbit(*self._parse_label(string))
    def add_orbits_from_labels(self,*strings):
        for label in strings:
            self.add_orbit_from_label(label)
    def get_orbit(self,idx):
        if(idx < 1 or idx > self.norbs): raise KeyError("orbit index {:d} out of range".format(idx))
        return self.orbits[idx-1]
    def get_orbit_label(self,idx):
        o = self.get_orbit(idx)
        pn = "p"
        if(o.z==1): pn="n"
        return pn+str(o.n)+_labels_orbital_angular_momentum[o.l]+str(o.j)
    def get_orbit_index(self,*nljz):
        return self.nljz_idx[nljz]
    def get_orbit_index_from_orbit(self,o):
        return self.get_orbit_index(o.n,o.l,o.j,o.z)
    def get_orbit_index_from_tuple(self,nljz):
        return self.nljz_idx[nljz]
    def get_orbit_index_from_label(self,string):
        return self.nljz_idx[self._parse_label(string)]
    def get_isospin_partner_index(self, idx, z):
        """
        index of the orbit with the same n, l, j as idx and charge z
        """
        o = self.get_orbit(idx)
        return self.get_orbit_index(o.n, o.l, o.j, z)
    def get_num_orbits(self):
        return self.norbs
    def set_orbits(self, emax=None, lmax=None, shell_model_space=None):
        if( emax != None):
            if( lmax==None ): lmax=emax
            for N in range(emax+1):
                for l in range(min(N,lmax)+1):
                    if( (N-l)%2 == 1 ): continue
                    n = (N-l)//2
                    for j in [2*l-1, 2*l+1]:
                        if( j<0 ): continue
                        for z in [-1,1]:
                            self.add_orbit( n,l,j,z )
        if( shell_model_space != None ):
            if( shell_model_space == "p-shell" ):
                self.add_orbits_from_labels( "p0p3","n0p3","p0p1","n0p1" )
            elif( shell_model_space == "sd-shell" ):
                self.add_orbits_from_labels( "p0d5","n0d5","p1s1","n1s1","p0d3","n0d3" )
            elif( shell_model_space == "pf-shell" ):
                self.add_orbits_from_labels( "p0f7","n0f7","p1p3","n1p3","p1p1","n1p1","p0f5","n0f5" )
            else:
                raise ValueError("Unknown shell model space: "+shell_model_space)
    def __str__(self):
        return self.print_orbits()
    def print_orbits(self):
        string = "Orbits list:\n"
        string += "idx,  n,  l,  j,  z,  e\n"
        for idx, o in enumerate(self.orbits, start=1):
            string += "{:3d},{:3d},{:3d},{:3d},{:3d},{:3d}\n".format(idx,*o.get_nljz(),o.e)
        return string[:-1]

def main():
    orbs = Orbits(emax=1)
    print(orbs)

if(__name__ == "__main__"):
    main()
