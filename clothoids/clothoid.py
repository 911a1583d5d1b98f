import collections
import collections.abc

import numpy

from . import fresnel
from . import geometry

Pose2D = collections.namedtuple('Pose2D', ('x', 'y', 'theta'))


class DegenerateCurveError(ValueError):
    """Raised when a geometric operation is ill-posed for a given curve, such
    as splitting or intersecting a zero-length or non-finite clothoid."""


_ClothoidBase = collections.namedtuple('ClothoidCurve', ('x0', 'y0', 'theta0', 'k', 'dk', 'L'))

class ClothoidCurve(_ClothoidBase):
    """A clothoid arc: the curve starting at (x0, y0) with heading theta0,
    whose curvature at arc length s is k + s*dk, for s in [0, L].

    Curves are immutable; trim() and friends return new curves.

    Evaluation outside of [0, L] is allowed and simply extrapolates the curve.
    """
    __slots__ = ()

    @classmethod
    def from_pose(cls, pose, k, dk, L):
        """Construct a curve starting at a Pose2D."""
        return cls(pose.x, pose.y, pose.theta, k, dk, L)

    @classmethod
    def from_dict(cls, mapping):
        """Construct a curve from a mapping with keys 'x0', 'y0', 'theta0',
        'kappa', 'dkappa' and 'L'."""
        values = []
        for key in ('x0', 'y0', 'theta0', 'kappa', 'dkappa', 'L'):
            if key not in mapping:
                raise ValueError(f'Missing field "{key}" in clothoid parameters.')
            values.append(float(mapping[key]))
        return cls(*values)

    @classmethod
    def from_poses(cls, pose0, pose1, **fit_kws):
        """Construct the G1-Hermite clothoid joining two Pose2Ds.

        Keyword arguments are passed to fitting.build_clothoid(). The fit
        itself (with iteration count) is available from fitting.fit()."""
        from . import fitting
        result = fitting.fit(pose0, pose1, **fit_kws)
        return cls.from_pose(pose0, result.k, result.dk, result.L)

    def to_dict(self):
        return dict(x0=self.x0, y0=self.y0, theta0=self.theta0, kappa=self.k, dkappa=self.dk, L=self.L)

    @property
    def is_degenerate(self):
        """True if the curve has zero length or non-finite parameters."""
        return self.L == 0 or not numpy.isfinite(self).all()

    def theta(self, s):
        """Heading at arc length(s) s."""
        return self.theta0 + s * (self.k + s * (self.dk / 2))

    def curvature(self, s):
        """Curvature at arc length(s) s."""
        return self.k + s * self.dk

    def tangent(self, s):
        """Unit tangent vector at arc length s."""
        return geometry.unit_vector(self.theta(s))

    def xy(self, s, offset=0):
        """Return the point at arc length s as an array of shape (2).

        If offset is nonzero, the point is displaced by that distance along the
        left normal, giving the corresponding point of a curve parallel to the
        clothoid."""
        C, S = fresnel.generalized_fresnel_cs(self.dk*s*s, self.k*s, self.theta0)
        point = numpy.array([self.x0 + s*C, self.y0 + s*S])
        if offset != 0:
            point += offset * geometry.left_normal(self.theta(s))
        return point

    def xy_derivative(self, s, offset=0):
        """Derivative with respect to s of xy(s, offset). For offset curves,
        the tangent is scaled by (1 - offset * curvature)."""
        return (1 - offset * self.curvature(s)) * self.tangent(s)

    def pose(self, s):
        """Return the Pose2D at arc length s."""
        x, y = self.xy(s)
        return Pose2D(x, y, self.theta(s))

    @property
    def start(self):
        return Pose2D(self.x0, self.y0, self.theta0)

    @property
    def end(self):
        return self.pose(self.L)

    def eval(self, s):
        """Return (x, y, theta, curvature) at the arc length s."""
        x, y = self.xy(s)
        return x, y, self.theta(s), self.curvature(s)

    def evaluate(self, s_values, offset=0):
        """Evaluate the curve at an arbitrary array of arc lengths.

        Returns: x, y, theta, curvature: arrays with the same shape as s_values.
        """
        s_values = numpy.asarray(s_values, dtype=float)
        flat = s_values.ravel()
        points = numpy.empty((len(flat), 2))
        for i, s in enumerate(flat):
            points[i] = self.xy(s, offset)
        x = points[:,0].reshape(s_values.shape)
        y = points[:,1].reshape(s_values.shape)
        return x, y, self.theta(s_values), self.curvature(s_values)

    def points(self, num_points, offset=0):
        """Return num_points points equally spaced in arc length over [0, L],
        as an array of shape (num_points, 2). The first and last points are
        exactly the endpoints of the curve."""
        if int(num_points) != num_points or num_points < 2:
            raise ValueError(f'At least two points are required, not {num_points}.')
        s_values = numpy.linspace(0, self.L, int(num_points))
        return numpy.array([self.xy(s, offset) for s in s_values])

    def trim(self, s_begin, s_end):
        """Return the piece of the curve between arc lengths s_begin and s_end
        as a new curve of length s_end - s_begin."""
        x, y = self.xy(s_begin)
        return type(self)(x, y, self.theta(s_begin), self.curvature(s_begin), self.dk, s_end - s_begin)

    def inflection_point(self):
        """Return the arc length strictly inside the curve where the curvature
        changes sign, or None if there is no such point."""
        if self.dk == 0:
            return None
        s = -self.k / self.dk
        if min(0, self.L) < s < max(0, self.L):
            return s
        return None

    def heading_range(self, s_begin=0, s_end=None):
        """Return the (min, max) heading over the arc-length range [s_begin, s_end]
        (default: the whole curve)."""
        if s_end is None:
            s_end = self.L
        thetas = [self.theta(s_begin), self.theta(s_end)]
        if self.dk != 0:
            # the heading is quadratic in s, with its extremum where the curvature vanishes
            s = -self.k / self.dk
            if min(s_begin, s_end) < s < max(s_begin, s_end):
                thetas.append(self.theta(s))
        return min(thetas), max(thetas)


def as_curve(curve):
    """Coerce a ClothoidCurve, a mapping (see ClothoidCurve.from_dict), or a
    sequence (x0, y0, theta0, k, dk, L) to a ClothoidCurve."""
    if isinstance(curve, ClothoidCurve):
        return curve
    if isinstance(curve, collections.abc.Mapping):
        return ClothoidCurve.from_dict(curve)
    values = numpy.asarray(curve, dtype=float)
    if values.shape != (6,):
        raise ValueError('A clothoid must be specified by the six values (x0, y0, theta0, k, dk, L).')
    return ClothoidCurve(*values)

def evaluate_clothoid(x0, y0, theta0, k, dk, s_values):
    """Evaluate the clothoid starting at (x0, y0) with heading theta0, curvature
    k and curvature derivative dk at the given arc lengths.

    Parameters:
        x0, y0, theta0, k, dk: clothoid parameters
        s_values: scalar or array of arc lengths

    Returns: x, y, theta, curvature: arrays with the same shape as s_values.
    """
    return ClothoidCurve(x0, y0, theta0, k, dk, 0).evaluate(s_values)

def points_on_clothoid(*args, num_points=None):
    """Return points equally spaced along a clothoid, as an array of shape
    (num_points, 2).

    Call as either of:
        points_on_clothoid(x0, y0, theta0, k, dk, L[, num_points])
        points_on_clothoid(curve[, num_points])
    where curve is anything accepted by as_curve(). If num_points is not
    given, 100 points are returned.

    In the six-parameter form L may also be an array of arc lengths, in which
    case the points at those arc lengths are returned, with shape (n, 2).
    """
    if len(args) == 6 and num_points is None and numpy.ndim(args[5]) > 0:
        s_values = numpy.asarray(args[5], dtype=float).ravel()
        curve = ClothoidCurve(*args[:5], 0)
        return numpy.array([curve.xy(s) for s in s_values]).reshape(len(s_values), 2)
    if len(args) in (1, 2):
        curve = as_curve(args[0])
        args = args[1:]
    elif len(args) in (6, 7):
        curve = ClothoidCurve(*args[:6])
        args = args[6:]
    else:
        raise ValueError('Expected a curve or six clothoid parameters, optionally followed by the number of points.')
    if args:
        if num_points is not None:
            raise ValueError('Number of points given twice.')
        num_points = args[0]
    if num_points is None:
        num_points = 100
    return curve.points(num_points)
