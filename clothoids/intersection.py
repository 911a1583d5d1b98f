"""Intersections between pairs of clothoids, or of curves parallel to them.

The broad phase bounds both curves with triangles (see bounding.bb_split())
and keeps the pairs of triangles that overlap. Each candidate pair is then
refined with Newton's method on
    P1(s1) - P2(s2) = 0
starting from the middle of both pieces. Pairs of pieces that are nearly
parallel may contain more than one intersection, or none that Newton's method
can find from the midpoint; these are bisected (up to a fixed depth) before
refinement. Pairs still nearly parallel at that depth only yield roots where
the curves cross each other: pieces lying along a common stretch (such as
overlapping collinear segments) have no isolated intersection and are
discarded.
"""

import collections
import logging

import numpy

from . import bounding
from . import clothoid
from . import geometry

logger = logging.getLogger(__name__)

TOLERANCE = 1e-8
MAX_ITER = 10
MAX_SUBDIVISION_DEPTH = 6

# broad-phase split tolerances: heading variation of each piece, and height of
# its triangle as a fraction of the curve length
SPLIT_ANGLE = numpy.pi / 18
SPLIT_SIZE_FRACTION = 0.1

# pieces whose relative heading comes within this angle (radians) of a
# multiple of pi are treated as nearly parallel
PARALLEL_MARGIN = 0.01

# Newton iterates may leave the candidate piece by this fraction of its length
_RANGE_MARGIN = 0.5
_MIN_SIN = 1e-10

IntersectionResult = collections.namedtuple('IntersectionResult', ('s1', 's2'))


def _check_curve(curve):
    if curve.is_degenerate:
        raise clothoid.DegenerateCurveError(f'Cannot intersect degenerate clothoid {tuple(curve)}.')

def _clamp(s, s_range):
    lo, hi = min(s_range), max(s_range)
    margin = _RANGE_MARGIN * (hi - lo)
    return min(max(s, lo - margin), hi + margin)

def _is_transversal(d1, d2):
    return abs(geometry.cross(d1, d2)) > _MIN_SIN * numpy.linalg.norm(d1) * numpy.linalg.norm(d2)

def _newton_step(curve1, s1, offset1, curve2, s2, offset2, residual):
    # solve d1*ds1 - d2*ds2 = -residual; None if the tangents are parallel
    d1 = curve1.xy_derivative(s1, offset1)
    d2 = curve2.xy_derivative(s2, offset2)
    if not _is_transversal(d1, d2):
        return None
    det = geometry.cross(d1, d2)
    return -geometry.cross(residual, d2) / det, geometry.cross(d1, residual) / det

def _newton(curve1, offset1, range1, curve2, offset2, range2, max_iter, tolerance):
    """Look for an intersection starting from the middle of two arc-length
    ranges. Returns (s1, s2), or None if the iteration failed."""
    s1 = 0.5 * (range1[0] + range1[1])
    s2 = 0.5 * (range2[0] + range2[1])
    for iteration in range(max_iter + 1):
        residual = curve1.xy(s1, offset1) - curve2.xy(s2, offset2)
        error = numpy.abs(residual).max()
        if error < tolerance:
            # one more step to polish the root, if it helps
            step = _newton_step(curve1, s1, offset1, curve2, s2, offset2, residual)
            if step is not None:
                p1, p2 = s1 + step[0], s2 + step[1]
                polished_error = numpy.abs(curve1.xy(p1, offset1) - curve2.xy(p2, offset2)).max()
                if polished_error <= error:
                    s1, s2 = p1, p2
            return s1, s2
        if iteration == max_iter:
            break
        step = _newton_step(curve1, s1, offset1, curve2, s2, offset2, residual)
        if step is None:
            return None
        s1 = _clamp(s1 + step[0], range1)
        s2 = _clamp(s2 + step[1], range2)
    return None

def _nearly_parallel(curve1, tri1, curve2, tri2):
    lo1, hi1 = curve1.heading_range(tri1.s0, tri1.s1)
    lo2, hi2 = curve2.heading_range(tri2.s0, tri2.s1)
    return geometry.interval_contains_multiple(lo1 - hi2, hi1 - lo2, numpy.pi, PARALLEL_MARGIN)

def _candidate_pairs(triangles1, triangles2, tolerance):
    """Return the pairs of overlapping triangles, first pruning with axis-aligned
    bounding boxes."""
    vertices1 = numpy.array([t.vertices for t in triangles1])
    vertices2 = numpy.array([t.vertices for t in triangles2])
    lo1, hi1 = vertices1.min(axis=1), vertices1.max(axis=1)
    lo2, hi2 = vertices2.min(axis=1), vertices2.max(axis=1)
    boxes_overlap = ((lo1[:, numpy.newaxis] <= hi2[numpy.newaxis] + tolerance) &
                     (lo2[numpy.newaxis] <= hi1[:, numpy.newaxis] + tolerance)).all(axis=2)
    return [(triangles1[i], triangles2[j]) for i, j in zip(*numpy.nonzero(boxes_overlap))
        if triangles1[i].overlaps(triangles2[j], tolerance)]

def _bisect(curve, triangle, offset):
    mid = 0.5 * (triangle.s0 + triangle.s1)
    return [bounding.bounding_triangle(curve, triangle.s0, mid, offset),
            bounding.bounding_triangle(curve, mid, triangle.s1, offset)]

def _in_domain(s, curve, tolerance):
    return min(0, curve.L) - tolerance <= s <= max(0, curve.L) + tolerance

def _merge_roots(roots, tolerance):
    merged = []
    for s1, s2 in sorted(roots):
        if not any(abs(s1 - m1) <= tolerance and abs(s2 - m2) <= tolerance for m1, m2 in merged):
            merged.append((s1, s2))
    return merged

def intersect(curve1, offset1, curve2, offset2, max_iter=MAX_ITER, tolerance=TOLERANCE):
    """Find the intersections of two clothoids, or of curves parallel to them.

    Parameters:
        curve1, curve2: ClothoidCurves to intersect.
        offset1, offset2: lateral offsets of the curves to intersect from
            curve1 and curve2 (along their left normals). Zero intersects the
            clothoids themselves.
        max_iter: maximum number of Newton steps per candidate intersection.
        tolerance: an intersection is accepted when the two points differ by
            less than this in both x and y. Intersections closer than this in
            both arc lengths are reported once.

    Returns: IntersectionResult namedtuple (s1, s2) of arrays containing the arc
        lengths of the intersections along each curve, sorted by s1 then s2.
        Both are empty if the curves do not intersect.

    Raises clothoid.DegenerateCurveError if either curve has zero length or
    non-finite parameters.
    """
    _check_curve(curve1)
    _check_curve(curve2)
    size1 = max(SPLIT_SIZE_FRACTION * abs(curve1.L), tolerance)
    size2 = max(SPLIT_SIZE_FRACTION * abs(curve2.L), tolerance)
    _, triangles1 = bounding.bb_split(curve1, SPLIT_ANGLE, size1, offset1)
    _, triangles2 = bounding.bb_split(curve2, SPLIT_ANGLE, size2, offset2)
    work = [(tri1, tri2, 0) for tri1, tri2 in _candidate_pairs(triangles1, triangles2, tolerance)]
    logger.debug('%d candidate pairs from %d x %d triangles.', len(work), len(triangles1), len(triangles2))

    roots = []
    failed = 0
    discarded = 0
    while work:
        tri1, tri2, depth = work.pop()
        ambiguous = _nearly_parallel(curve1, tri1, curve2, tri2)
        if ambiguous and depth < MAX_SUBDIVISION_DEPTH:
            for sub1 in _bisect(curve1, tri1, offset1):
                for sub2 in _bisect(curve2, tri2, offset2):
                    if sub1.overlaps(sub2, tolerance):
                        work.append((sub1, sub2, depth + 1))
            continue
        root = _newton(curve1, offset1, (tri1.s0, tri1.s1), curve2, offset2, (tri2.s0, tri2.s1), max_iter, tolerance)
        if root is None:
            failed += 1
            continue
        s1, s2 = root
        if ambiguous and not _is_transversal(curve1.xy_derivative(s1, offset1), curve2.xy_derivative(s2, offset2)):
            # pieces that overlap along a common stretch
            discarded += 1
            continue
        if _in_domain(s1, curve1, tolerance) and _in_domain(s2, curve2, tolerance):
            s1 = min(max(s1, min(0, curve1.L)), max(0, curve1.L))
            s2 = min(max(s2, min(0, curve2.L)), max(0, curve2.L))
            roots.append((s1, s2))

    merged = _merge_roots(roots, tolerance)
    logger.debug('Found %d intersections (%d candidates without a root, %d overlapping pieces discarded).',
        len(merged), failed, discarded)
    s1 = numpy.array([s1 for s1, s2 in merged], dtype=float)
    s2 = numpy.array([s2 for s1, s2 in merged], dtype=float)
    return IntersectionResult(s1, s2)

def intersect_clothoids(curve1, offset1, curve2, offset2, max_iter=MAX_ITER, tolerance=TOLERANCE):
    """Find the intersections of two clothoids (or curves parallel to them).

    As intersect(), except that the curves may be given as anything accepted
    by clothoid.as_curve(): a ClothoidCurve, a mapping with keys 'x0', 'y0',
    'theta0', 'kappa', 'dkappa', 'L', or a sequence (x0, y0, theta0, k, dk, L).

    Returns: s1, s2: arrays of arc lengths of the intersections along each curve.
    """
    if int(max_iter) != max_iter or max_iter < 1:
        raise ValueError(f'max_iter must be a positive integer, not {max_iter}.')
    if not tolerance > 0:
        raise ValueError(f'tolerance must be positive, not {tolerance}.')
    result = intersect(clothoid.as_curve(curve1), offset1, clothoid.as_curve(curve2), offset2, int(max_iter), tolerance)
    return result.s1, result.s2
