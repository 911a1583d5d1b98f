import numpy

def normalize_angle(angle):
    """Return the angle (in radians) reduced to the range (-pi, pi]."""
    return angle - 2 * numpy.pi * numpy.ceil((angle - numpy.pi) / (2 * numpy.pi))

def unit_vector(theta):
    """Return the unit vector(s) pointing along the angle(s) theta.

    Parameters:
    theta: scalar or array of shape (n)

    Returns an array of shape (2) or (n, 2)."""
    theta = numpy.asarray(theta, dtype=float)
    return numpy.stack([numpy.cos(theta), numpy.sin(theta)], axis=-1)

def left_normal(theta):
    """Return the unit normal(s) to the left of the direction(s) theta, i.e.
    the direction rotated counterclockwise by 90 degrees."""
    theta = numpy.asarray(theta, dtype=float)
    return numpy.stack([-numpy.sin(theta), numpy.cos(theta)], axis=-1)

def cross(v0, v1):
    """Return the z-component of the cross product of 2d vectors."""
    return v0[...,0]*v1[...,1] - v0[...,1]*v1[...,0]

def line_intersection(p0, t0, p1, t1, min_sin=1e-12):
    """Find where two lines, given as point + direction, intersect.

    Parameters:
    p0, t0: point on and direction of the first line
    p1, t1: point on and direction of the second line
    min_sin: lines whose (unit) directions have a cross product smaller than
        this in magnitude are considered parallel.

    Returns alpha such that p0 + alpha*t0 lies on the second line, or None if
    the lines are parallel."""
    det = cross(t0, t1)
    if abs(det) <= min_sin * numpy.linalg.norm(t0) * numpy.linalg.norm(t1):
        return None
    return cross(p1 - p0, t1) / det

def distance_to_line(point, p0, p1):
    """Return the distance from a point to the infinite line through p0 and p1.
    If p0 and p1 coincide, the distance to p0 is returned."""
    v = p1 - p0
    w = point - p0
    length = numpy.sqrt((v*v).sum())
    if length == 0:
        return numpy.sqrt((w*w).sum())
    return abs(cross(v, w)) / length

def _candidate_axes(vertices):
    # edge directions and edge normals; zero-length edges carry no direction
    edges = numpy.roll(vertices, -1, axis=0) - vertices
    lengths = numpy.sqrt((edges**2).sum(axis=1))
    edges = edges[lengths > 0] / lengths[lengths > 0, numpy.newaxis]
    normals = numpy.roll(edges, 1, axis=-1)
    normals[...,0] *= -1
    return numpy.concatenate([normals, edges])

def triangles_overlap(tri0, tri1, tolerance=0):
    """Test whether two triangles overlap, using the separating axis theorem.

    Degenerate triangles (segments or points) are handled: in addition to the
    edge normals, edge directions and the coordinate axes are tried as
    separating axes, so collinear segments that do not touch are reported as
    disjoint.

    Parameters:
    tri0, tri1: arrays of shape (3, 2) containing the triangle vertices.
    tolerance: triangles closer than this distance along every axis tried are
        considered to overlap.

    Returns True if the triangles intersect (or touch), False otherwise."""
    tri0 = numpy.asarray(tri0, dtype=float)
    tri1 = numpy.asarray(tri1, dtype=float)
    axes = numpy.concatenate([_candidate_axes(tri0), _candidate_axes(tri1), numpy.eye(2)])
    proj0 = numpy.dot(tri0, axes.T)
    proj1 = numpy.dot(tri1, axes.T)
    separated = (proj0.max(axis=0) + tolerance < proj1.min(axis=0)) | (proj1.max(axis=0) + tolerance < proj0.min(axis=0))
    return not separated.any()

def interval_contains_multiple(lo, hi, period, margin=0):
    """Return True if the closed interval [lo - margin, hi + margin] contains
    an integer multiple of period."""
    return numpy.floor((hi + margin) / period) >= numpy.ceil((lo - margin) / period)
