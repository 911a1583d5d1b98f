"""Hierarchical bounding of clothoid arcs by triangles.

A clothoid arc whose curvature does not change sign and whose heading varies
by less than pi/2 is contained in the triangle formed by its two endpoints and
the intersection of its endpoint tangents. Longer arcs are cut at their
inflection point and then bisected until every piece is small enough.
The same holds for curves parallel to the clothoid (at a fixed lateral offset),
as long as the offset does not exceed the radius of curvature.
"""

import collections
import logging

import numpy

from . import clothoid
from . import geometry

logger = logging.getLogger(__name__)

MAX_DEPTH = 12

# below this heading variation, a piece is treated as straight and the
# tangent-intersection vertex is replaced by a point on the start tangent
_STRAIGHT_ANGLE = 1e-4 * numpy.pi / 2


_TriangleBase = collections.namedtuple('Triangle2D', ('p0', 'p1', 'p2', 's0', 's1'))

class Triangle2D(_TriangleBase):
    """Triangle with vertices p0, p1, p2 (arrays of shape (2)) bounding the
    piece of a curve between arc lengths s0 and s1. p0 and p1 are the endpoints
    of that piece; p2 lies on the tangent line through p0."""
    __slots__ = ()

    @property
    def vertices(self):
        return numpy.array([self.p0, self.p1, self.p2])

    @property
    def height(self):
        """Distance of the tangent vertex from the chord p0-p1: the maximum
        extent of the triangle orthogonal to the chord."""
        return geometry.distance_to_line(self.p2, self.p0, self.p1)

    def overlaps(self, other, tolerance=0):
        return geometry.triangles_overlap(self.vertices, other.vertices, tolerance)


def bounding_triangle(curve, s0, s1, offset=0):
    """Return the Triangle2D bounding the piece of the curve between arc
    lengths s0 and s1, displaced laterally by offset.

    The piece should not contain an inflection point, and its heading should
    vary by less than pi/2; otherwise the triangle is not guaranteed to
    contain the curve."""
    p0 = curve.xy(s0, offset)
    p1 = curve.xy(s1, offset)
    t0 = curve.tangent(s0)
    theta_min, theta_max = curve.heading_range(s0, s1)
    alpha = None
    if theta_max - theta_min > _STRAIGHT_ANGLE:
        alpha = geometry.line_intersection(p0, t0, p1, curve.tangent(s1))
    if alpha is None:
        alpha = s1 - s0
    return Triangle2D(p0, p1, p0 + alpha * t0, s0, s1)

def _check_curve(curve):
    if curve.is_degenerate:
        raise clothoid.DegenerateCurveError(f'Cannot split degenerate clothoid {tuple(curve)}.')

def bb_split(curve, max_angle, max_size, offset=0, max_depth=MAX_DEPTH):
    """Split a clothoid into pieces, each bounded by a triangle.

    Parameters:
        curve: ClothoidCurve to split.
        max_angle: maximum heading variation (radians) over each piece.
            Pieces are always split until the variation is below pi/2.
        max_size: maximum height of each bounding triangle over its chord.
        offset: lateral offset of the bounded curve from the clothoid (along
            the left normal). Zero bounds the clothoid itself.
        max_depth: maximum number of bisections of any piece. Pieces that
            still violate the tolerances at this depth are accepted anyway.

    Returns: (sub_curves, triangles), two lists of the same length. sub_curves
        contains ClothoidCurves that partition the input curve, in order of
        arc length; triangles contains the matching Triangle2Ds, whose s0 and
        s1 give the range of each piece on the input curve.
    """
    _check_curve(curve)
    breaks = [0, curve.L]
    inflection = curve.inflection_point()
    if inflection is not None:
        breaks.insert(1, inflection)
    # stack of (s0, s1, depth); the pieces are popped in arc-length order
    stack = [(s0, s1, 0) for s0, s1 in zip(breaks[-2::-1], breaks[:0:-1])]
    sub_curves = []
    triangles = []
    depth_capped = 0
    while stack:
        s0, s1, depth = stack.pop()
        theta_min, theta_max = curve.heading_range(s0, s1)
        angle = theta_max - theta_min
        triangle = None
        too_large = angle > max_angle or angle >= numpy.pi / 2
        if not too_large:
            triangle = bounding_triangle(curve, s0, s1, offset)
            too_large = triangle.height > max_size
        if too_large:
            if depth < max_depth:
                mid = 0.5 * (s0 + s1)
                stack.append((mid, s1, depth + 1))
                stack.append((s0, mid, depth + 1))
                continue
            depth_capped += 1
            if triangle is None:
                triangle = bounding_triangle(curve, s0, s1, offset)
        sub_curves.append(curve.trim(s0, s1))
        triangles.append(triangle)
    if depth_capped:
        logger.warning('%d pieces reached the maximum split depth %d without meeting the tolerances (max_angle=%g, max_size=%g).',
            depth_capped, max_depth, max_angle, max_size)
    logger.debug('Split clothoid of length %g into %d pieces.', curve.L, len(triangles))
    return sub_curves, triangles

def bounding_triangles(x0, y0, theta0, k, dk, L, max_angle, max_size, offset=0):
    """Compute bounding triangles for a clothoid given by its parameters.

    Parameters: as for bb_split(), with the curve given as x0, y0, theta0, k,
        dk, L.

    Returns: array of shape (n, 6), where each row contains the vertices of a
        triangle: [x0, y0, x1, y1, x2, y2].
    """
    curve = clothoid.ClothoidCurve(x0, y0, theta0, k, dk, L)
    _, triangles = bb_split(curve, max_angle, max_size, offset)
    return numpy.array([triangle.vertices.ravel() for triangle in triangles]).reshape(-1, 6)
