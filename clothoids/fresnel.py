"""Standard and generalized Fresnel integrals.

The generalized Fresnel integrals (and their moments) are
    C_k(a, b, c) = int_0^1 t^k cos(a/2 t^2 + b t + c) dt
    S_k(a, b, c) = int_0^1 t^k sin(a/2 t^2 + b t + c) dt
for k = 0, 1, 2. The k=0 pair gives points on a clothoid; the higher moments
appear when differentiating the G1 fitting residual.

Internally the computation is done on the complex moments
    M_k(a, b) = int_0^1 t^k exp(i (a/2 t^2 + b t)) dt = C_k + i S_k  (for c=0)
and the constant phase c is applied as a final rotation. Three regimes are
used: a linear system in the moments when |b| dominates |a|, a power series
in a for small |a|, and a reduction to standard Fresnel integrals otherwise.
"""

import numpy
from scipy import linalg
from scipy import special

# For |a| below this value, exp(i a t^2 / 2) is expanded in a power series.
# Above it, the moments are reduced to standard Fresnel integrals, which lose
# accuracy as a -> 0 (the reduction divides by powers of sqrt(|a|)).
A_SMALL = 1.0

_SERIES_EPS = 1e-17
_MAX_SERIES_TERMS = 500

# Number of moments in the linear system used when |b| dominates |a|. That
# system is used for |b| >= 4 (|a| + _BANDED_MOMENTS), where it is diagonally
# dominant by a factor of four.
_BANDED_MOMENTS = 24

def fresnel_cs(y):
    """Return the standard Fresnel integrals (C, S) at y, where
    C(y) = int_0^y cos(pi/2 t^2) dt and S(y) = int_0^y sin(pi/2 t^2) dt.

    y may be a scalar or an array."""
    s, c = special.fresnel(y)
    return c, s

def fresnel_cs_moments(nk, y):
    """Return arrays (C, S) of length nk (1 <= nk <= 3) containing the moments
    int_0^y t^k cos(pi/2 t^2) dt and int_0^y t^k sin(pi/2 t^2) dt."""
    C = numpy.empty(nk)
    S = numpy.empty(nk)
    C[0], S[0] = fresnel_cs(y)
    if nk > 1:
        u = numpy.pi / 2 * y * y
        su = numpy.sin(u)
        cu = numpy.cos(u)
        C[1] = su / numpy.pi
        S[1] = (1 - cu) / numpy.pi
        if nk > 2:
            C[2] = (y * su - S[0]) / numpy.pi
            S[2] = (C[0] - y * cu) / numpy.pi
    return C, S

def _kummer_series(k, z):
    # int_0^1 t^k exp(z t) dt = exp(z) * sum_n (-z)^n / ((k+1)(k+2)...(k+n+1)).
    # Only used for k >= |z| (or |z| < 1), where the terms decrease monotonically.
    term = 1 / (k + 1)
    total = term
    for n in range(1, _MAX_SERIES_TERMS):
        term *= -z / (k + n + 1)
        total += term
        if abs(term) < _SERIES_EPS:
            break
    return numpy.exp(z) * total

def _moments_a_zero(nk, b):
    """Complex moments int_0^1 t^k exp(i b t) dt for k = 0..nk-1."""
    z = 1j * b
    ez = numpy.exp(z)
    moments = numpy.empty(nk, dtype=complex)
    # the upward recurrence M_k = (e^z - k M_{k-1}) / z is stable for k < |b|
    if abs(b) >= 1:
        n_recurrence = min(nk, int(numpy.ceil(abs(b))))
    else:
        n_recurrence = 0
    if n_recurrence > 0:
        moments[0] = (ez - 1) / z
    for k in range(1, n_recurrence):
        moments[k] = (ez - k * moments[k-1]) / z
    for k in range(n_recurrence, nk):
        moments[k] = _kummer_series(k, z)
    return moments

def _moments_a_small(nk, a, b):
    """Complex moments for small |a|, expanding exp(i a t^2 / 2) = sum_n (i a / 2)^n t^2n / n!"""
    coefficients = [1]
    while abs(coefficients[-1]) > _SERIES_EPS and len(coefficients) < _MAX_SERIES_TERMS:
        n = len(coefficients)
        coefficients.append(coefficients[-1] * 0.5j * a / n)
    base = _moments_a_zero(nk + 2 * len(coefficients), b)
    moments = numpy.zeros(nk, dtype=complex)
    for n, coefficient in enumerate(coefficients):
        moments += coefficient * base[2*n:2*n+nk]
    return moments

def _moments_a_large(nk, a, b):
    """Complex moments for large |a|, by completing the square in the phase:
    a/2 t^2 + b t = s (pi/2 u^2) + g with u = z t + ell, s = sign(a)."""
    s = 1 if a > 0 else -1
    absa = abs(a)
    z = numpy.sqrt(absa / numpy.pi)
    ell = s * b / numpy.sqrt(numpy.pi * absa)
    g = -0.5 * s * b * b / absa
    Cl, Sl = fresnel_cs_moments(nk, ell)
    Cz, Sz = fresnel_cs_moments(nk, ell + z)
    F = (Cz - Cl) + 1j * s * (Sz - Sl)
    # expand t^k = ((u - ell) / z)^k
    moments = numpy.empty(nk, dtype=complex)
    moments[0] = F[0]
    if nk > 1:
        moments[1] = F[1] - ell * F[0]
    if nk > 2:
        moments[2] = F[2] - ell * (2 * F[1] - ell * F[0])
    return numpy.exp(1j * g) * moments / z**numpy.arange(1, nk + 1)

def _moments_b_large(nk, a, b):
    """Complex moments when |b| is large compared to |a|.

    Integrating d/dt (t^k exp(i phi)) over [0, 1], with phi = a/2 t^2 + b t,
    gives for k >= 0
        a M_{k+1} + b M_k - i k M_{k-1} = -i E + i [k == 0],  E = exp(i phi(1)),
    a tridiagonal system in M_0 ... M_K. It is closed with the leading
    asymptotic term M_{K+1} ~ -i E / (a + b), whose error is damped by a
    factor of |a / b| per moment on its way down to the first ones.

    In this range the completed-square reduction loses about ell^k of accuracy
    in moment k, with ell = b / sqrt(pi |a|).
    """
    n = _BANDED_MOMENTS + 1
    E = numpy.exp(1j * (a / 2 + b))
    banded = numpy.zeros((3, n), dtype=complex)
    banded[0, 1:] = a
    banded[1] = b
    banded[2, :-1] = -1j * numpy.arange(1, n)
    rhs = numpy.full(n, -1j * E)
    rhs[0] += 1j
    rhs[-1] -= a * (-1j * E / (a + b))
    return linalg.solve_banded((1, 1), banded, rhs)[:nk]

def generalized_fresnel_moments(nk, a, b, c):
    """Compute the generalized Fresnel cosine and sine moments.

    Parameters:
        nk: number of moments to compute; an integer in [1, 3].
        a, b, c: real parameters of the phase a/2 t^2 + b t + c.

    Returns: (C, S), arrays of length nk with
        C[k] = int_0^1 t^k cos(a/2 t^2 + b t + c) dt
        S[k] = int_0^1 t^k sin(a/2 t^2 + b t + c) dt
    """
    if int(nk) != nk or not 1 <= nk <= 3:
        raise ValueError(f'Number of moments must be an integer in [1, 3], not {nk}.')
    nk = int(nk)
    if abs(b) >= 4 * (abs(a) + _BANDED_MOMENTS):
        moments = _moments_b_large(nk, a, b)
    elif abs(a) < A_SMALL:
        moments = _moments_a_small(nk, a, b)
    else:
        moments = _moments_a_large(nk, a, b)
    moments *= numpy.exp(1j * c)
    return moments.real, moments.imag

def generalized_fresnel_cs(a, b, c):
    """Return the generalized Fresnel integrals (C, S) as floats, where
    C = int_0^1 cos(a/2 t^2 + b t + c) dt and S = int_0^1 sin(a/2 t^2 + b t + c) dt."""
    C, S = generalized_fresnel_moments(1, a, b, c)
    return float(C[0]), float(S[0])
