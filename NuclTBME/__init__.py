"""
J-coupled two-body matrix elements for nuclear many-body calc.
"""
from .Orbits import Orbit, Orbits
from .TwoBodySpace import Ket, TwoBodyChannel, TwoBodySpace, TwoBodyChannel_ph, TwoBodySpace_ph
from .ModelSpace import ModelSpace
from .TwoBodyME import TwoBodyME, Hermiticity, from_particle_hole_representation
from .TwoBodyME import TBMELookupError, SelectionRuleError, ShapeMismatchError, SerializationError
from .TwoBodyME_ph import TwoBodyME_ph
