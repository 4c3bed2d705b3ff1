#!/usr/bin/env python3
import functools
import numpy as np
from sympy import Rational
from sympy.physics.wigner import wigner_6j, clebsch_gordan

@functools.lru_cache(maxsize=None)
def sixj(j1, j2, j3, j4, j5, j6):
    """
    { j1 j2 j3 }
    { j4 j5 j6 }
    Note: all inputs are doubled
    """
    return float(wigner_6j(Rational(j1,2), Rational(j2,2), Rational(j3,2), \
            Rational(j4,2), Rational(j5,2), Rational(j6,2)))

@functools.lru_cache(maxsize=None)
def cg(j1, m1, j2, m2, j3, m3):
    """
    < j1 m1 j2 m2 | j3 m3 >
    Note: all inputs are doubled
    """
    if(m1 + m2 != m3): return 0.0
    return float(clebsch_gordan(Rational(j1,2), Rational(j2,2), Rational(j3,2), \
            Rational(m1,2), Rational(m2,2), Rational(m3,2)))

def triag(J1, J2, J3):
    """
    True when J1, J2, J3 do NOT satisfy the triangle condition
    """
    b = True
    if(abs(J1-J2) <= J3 <= J1+J2): b = False
    return b

def norm_factor(a, b, c, d):
    """
    sqrt( (1+delta_ab) (1+delta_cd) )
    """
    fact = 1.0
    if(a==b): fact *= np.sqrt(2.0)
    if(c==d): fact *= np.sqrt(2.0)
    return fact

if(__name__=="__main__"):
    print(sixj(1, 1, 0, 1, 1, 2))
    print(cg(1, 1, 1, -1, 0, 0))
