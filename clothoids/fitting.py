"""G1-Hermite interpolation with a single clothoid.

Given two points with tangent directions, find the clothoid (curvature k,
curvature derivative dk, length L) leaving the first point with the first
heading and arriving at the second point with the second heading.

Following Bertolazzi and Frego, "G1 fitting with clothoids" (Mathematical
Methods in the Applied Sciences, 2015): in a frame aligned with the chord
between the points, the problem reduces to finding the root of one scalar
function of A = dk*L^2/2,
    g(A) = int_0^1 sin(A t^2 + (Delta - A) t + phi0) dt,
where phi0 and phi1 are the headings relative to the chord and
Delta = phi1 - phi0. This root is found by Newton's method.
"""

import collections
import logging

import numpy

from . import fresnel
from . import geometry

logger = logging.getLogger(__name__)

TOLERANCE = 1e-12
MAX_ITER = 20

# coefficients of the rational fit of the root A(phi0, phi1) used as the
# initial Newton guess (from the above reference)
_GUESS_COEFFICIENTS = (2.989696028701907, 0.716228953608281, -0.458969738821509,
    -0.502821153340377, 0.261062141752652, -0.045854475238709)

ClothoidDerivatives = collections.namedtuple('ClothoidDerivatives',
    ('dk_dtheta0', 'ddk_dtheta0', 'dL_dtheta0', 'dk_dtheta1', 'ddk_dtheta1', 'dL_dtheta1'))

ClothoidFit = collections.namedtuple('ClothoidFit', ('k', 'dk', 'L', 'iterations', 'derivatives'))

# relative angles this close to -pi are taken as pi
_ANGLE_EPS = 1e-14

def _relative_angle(theta, phi):
    angle = geometry.normalize_angle(theta - phi)
    if angle < -numpy.pi + _ANGLE_EPS:
        angle += 2 * numpy.pi
    return angle

def _guess_a(phi0, phi1):
    c0, c1, c2, c3, c4, c5 = _GUESS_COEFFICIENTS
    x = phi0 / numpy.pi
    y = phi1 / numpy.pi
    xy = x * y
    x *= x
    y *= y
    return (phi0 + phi1) * (c0 + xy*(c1 + xy*c2) + (c3 + xy*c4)*(x + y) + c5*(x*x + y*y))

def build_clothoid(x0, y0, theta0, x1, y1, theta1, derivatives=False, max_iter=MAX_ITER, tolerance=TOLERANCE):
    """Compute the parameters of the G1-Hermite clothoid between two points.

    Parameters:
        x0, y0, theta0: initial point and heading (radians)
        x1, y1, theta1: final point and heading (radians)
        derivatives: if True, also compute the partial derivatives of the
            solution with respect to theta0 and theta1.
        max_iter: maximum number of Newton steps.
        tolerance: Newton iteration stops when the residual is below this.

    Returns: ClothoidFit namedtuple (k, dk, L, iterations, derivatives), where
        k: curvature at the initial point
        dk: derivative of the curvature with respect to arc length (so the
            curvature at the final point is k + dk*L)
        L: length of the clothoid
        iterations: number of Newton steps taken. If the iteration did not
            converge, this equals max_iter and k, dk, L are the last estimates.
        derivatives: None, or if requested a ClothoidDerivatives namedtuple
            containing the partial derivatives of k, dk and L with respect to
            theta0 and theta1.

    If the two points coincide there is no meaningful clothoid; a zero-length,
    zero-curvature result (with zero derivatives if requested) is returned.
    """
    dx = x1 - x0
    dy = y1 - y0
    r = numpy.hypot(dx, dy)
    scale = max(1, abs(x0), abs(y0), abs(x1), abs(y1))
    if r <= numpy.finfo(float).eps * scale:
        if geometry.normalize_angle(theta1 - theta0) != 0:
            logger.warning('Coincident endpoints (%g, %g) with different headings: returning a zero-length clothoid.', x0, y0)
        else:
            logger.debug('Coincident endpoints (%g, %g): returning a zero-length clothoid.', x0, y0)
        zero_derivatives = ClothoidDerivatives(0, 0, 0, 0, 0, 0) if derivatives else None
        return ClothoidFit(0.0, 0.0, 0.0, 0, zero_derivatives)

    phi = numpy.arctan2(dy, dx)
    phi0 = _relative_angle(theta0, phi)
    phi1 = _relative_angle(theta1, phi)
    delta = phi1 - phi0

    A = _guess_a(phi0, phi1)
    iterations = 0
    while True:
        X, Y = fresnel.generalized_fresnel_moments(3, 2*A, delta - A, phi0)
        g = Y[0]
        if abs(g) < tolerance:
            logger.debug('Clothoid fit converged in %d iterations.', iterations)
            break
        dg = X[2] - X[1]
        if iterations >= max_iter or dg == 0:
            logger.warning('Clothoid fit did not converge after %d iterations (residual %g).', iterations, g)
            iterations = max_iter
            break
        A -= g / dg
        iterations += 1

    L = r / X[0]
    k = (delta - A) / L
    dk = 2 * A / L**2

    if not derivatives:
        return ClothoidFit(k, dk, L, iterations, None)

    # Implicit differentiation of g(A; phi0, phi1) = 0, using
    # dg/dA = X2 - X1, dg/dphi0 = X0 - X1, dg/dphi1 = X1,
    # and of L = r / X0, with dX0/dA = -(Y2 - Y1), dX0/dphi0 = -(Y0 - Y1), dX0/dphi1 = -Y1.
    dg_dA = X[2] - X[1]
    dA_0 = -(X[0] - X[1]) / dg_dA
    dA_1 = -X[1] / dg_dA
    dX0_0 = -(Y[2] - Y[1]) * dA_0 - (Y[0] - Y[1])
    dX0_1 = -(Y[2] - Y[1]) * dA_1 - Y[1]
    dL_0 = -L * dX0_0 / X[0]
    dL_1 = -L * dX0_1 / X[0]
    dk_0 = (-1 - dA_0 - k * dL_0) / L
    dk_1 = (1 - dA_1 - k * dL_1) / L
    ddk_0 = 2 * dA_0 / L**2 - 2 * dk * dL_0 / L
    ddk_1 = 2 * dA_1 / L**2 - 2 * dk * dL_1 / L
    return ClothoidFit(k, dk, L, iterations, ClothoidDerivatives(dk_0, ddk_0, dL_0, dk_1, ddk_1, dL_1))

def fit(pose0, pose1, **kws):
    """Fit the G1-Hermite clothoid between two Pose2Ds. Keyword arguments are
    as for build_clothoid(), which see."""
    return build_clothoid(pose0.x, pose0.y, pose0.theta, pose1.x, pose1.y, pose1.theta, **kws)
