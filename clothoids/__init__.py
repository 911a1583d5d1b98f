'''
# clothoids

Python modules for computations with clothoids (Euler spirals): plane curves
whose curvature varies linearly with arc length, as used for smooth path
planning between oriented points and for road and track design.

 - fresnel: standard Fresnel integrals (via scipy.special) and the generalized
   Fresnel integrals and their first moments, from which clothoid points are
   computed.
 - clothoid: the ClothoidCurve value type (and Pose2D): evaluation of
   position, heading and curvature along the curve, or along a curve parallel
   to it; uniform sampling.
 - fitting: G1-Hermite interpolation, i.e. find the clothoid joining two
   points with given tangent directions, optionally with the sensitivity of
   the solution to those directions.
 - bounding: split a clothoid into pieces bounded by triangles meeting given
   angle and size tolerances.
 - intersection: find all intersections of two clothoids (or of curves
   parallel to them).
 - geometry: basic 2D helpers (angles, lines, triangle overlap tests).
'''

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
