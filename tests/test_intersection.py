import numpy
import pytest

from clothoids import clothoid
from clothoids import intersection

def curve(*params):
    return clothoid.ClothoidCurve(*params)

X_AXIS = curve(-10, 0, 0, 0, 0, 20)

def check_points_coincide(curve1, offset1, curve2, offset2, result):
    for s1, s2 in zip(result.s1, result.s2):
        assert numpy.allclose(curve1.xy(s1, offset1), curve2.xy(s2, offset2), atol=1e-7)

def test_crossing_segments():
    result = intersection.intersect(curve(0, 0, 0, 0, 0, 10), 0, curve(5, -5, numpy.pi/2, 0, 0, 10), 0)
    assert len(result.s1) == len(result.s2) == 1
    assert result.s1[0] == pytest.approx(5)
    assert result.s2[0] == pytest.approx(5)

def test_offset_segments():
    line = curve(0, 0, 0, 0, 0, 10)
    vertical = curve(5, -5, numpy.pi/2, 0, 0, 10)
    s1, s2 = intersection.intersect(line, 1, vertical, 0)
    assert numpy.allclose(s1, [5])
    assert numpy.allclose(s2, [6])
    # the left side of the upward line is towards negative x
    s1, s2 = intersection.intersect(line, 0, vertical, 1)
    assert numpy.allclose(s1, [4])
    assert numpy.allclose(s2, [5])

def test_touching_segments():
    s1, s2 = intersection.intersect(curve(0, 0, 0, 0, 0, 10), 0, curve(5, 0, numpy.pi/2, 0, 0, 5), 0)
    assert numpy.allclose(s1, [5])
    assert numpy.allclose(s2, [0], atol=1e-12)
    assert s2[0] >= 0

def test_overlapping_collinear_segments():
    # no isolated intersections along the shared stretch
    result = intersection.intersect(curve(0, 0, 0, 0, 0, 10), 0, curve(5, 0, 0, 0, 0, 10), 0)
    assert result.s1.shape == result.s2.shape == (0,)
    result = intersection.intersect(curve(0, 0, 0, 0, 0, 10), 0, curve(15, 0, numpy.pi, 0, 0, 10), 0)
    assert len(result.s1) == 0

def test_nearly_parallel_crossing():
    angle = 0.005
    result = intersection.intersect(curve(0, 0, 0, 0, 0, 10), 0, curve(0, -0.025, angle, 0, 0, 10), 0)
    x = 0.025 / numpy.tan(angle)
    assert numpy.allclose(result.s1, [x])
    assert numpy.allclose(result.s2, [x / numpy.cos(angle)])

def test_negative_length():
    # a line traced backwards from the origin along the negative x axis
    line = curve(0, 0, 0, 0, 0, -10)
    vertical = curve(-5, -5, numpy.pi/2, 0, 0, 10)
    result = intersection.intersect(line, 0, vertical, 0)
    assert numpy.allclose(result.s1, [-5])
    assert numpy.allclose(result.s2, [5])
    swapped = intersection.intersect(vertical, 0, line, 0)
    assert numpy.allclose(swapped.s1, [5])
    assert numpy.allclose(swapped.s2, [-5])
    # nothing ahead of the start of the backwards line
    result = intersection.intersect(line, 0, curve(5, -5, numpy.pi/2, 0, 0, 10), 0)
    assert len(result.s1) == 0

def test_line_and_circle():
    circle = curve(0, -5, 0, 0.2, 0, 10 * numpy.pi)
    result = intersection.intersect(X_AXIS, 0, circle, 0)
    assert numpy.allclose(result.s1, [5, 15])
    assert numpy.allclose(result.s2, [7.5 * numpy.pi, 2.5 * numpy.pi])
    check_points_coincide(X_AXIS, 0, circle, 0, result)

def test_shallow_crossings():
    # circle of radius 5 dipping just below the x axis: the crossing angles are
    # only about 0.02 radians
    circle = curve(0, -0.001, 0, 0.2, 0, 10 * numpy.pi)
    phi = numpy.arccos(4.999 / 5)
    dx = 5 * numpy.sin(phi)
    result = intersection.intersect(X_AXIS, 0, circle, 0)
    assert numpy.allclose(result.s1, [10 - dx, 10 + dx], atol=1e-7)
    assert numpy.allclose(result.s2, [10 * numpy.pi - 5 * phi, 5 * phi], atol=1e-7)
    check_points_coincide(X_AXIS, 0, circle, 0, result)

def test_parallel_lines():
    result = intersection.intersect(curve(0, 0, 0, 0, 0, 10), 0, curve(0, 1, 0, 0, 0, 10), 0)
    assert result.s1.shape == result.s2.shape == (0,)
    # the offset curve of the second line coincides with neither
    result = intersection.intersect(curve(0, 0, 0, 0, 0, 10), 0.5, curve(0, 1, 0, 0, 0, 10), 0)
    assert len(result.s1) == 0

def test_spiral_crossing_line():
    # heading stays in (0, pi) and y rises by more than 3: exactly one crossing
    spiral = curve(0, -3, 0.5, 0.1, 0.02, 10)
    line = curve(-10, 0, 0, 0, 0, 30)
    result = intersection.intersect(line, 0, spiral, 0)
    assert len(result.s1) == 1
    check_points_coincide(line, 0, spiral, 0, result)
    assert spiral.xy(result.s2[0])[1] == pytest.approx(0, abs=1e-7)
    swapped = intersection.intersect(spiral, 0, line, 0)
    assert numpy.allclose(swapped.s1, result.s2, atol=1e-7)
    assert numpy.allclose(swapped.s2, result.s1, atol=1e-7)

@pytest.mark.parametrize('offset1, offset2', [(0, 0), (0.5, -0.3)])
def test_spirals_symmetric(offset1, offset2):
    spiral1 = curve(0, 0, 0.7 * numpy.pi, -0.1, 0.02, 15)
    spiral2 = curve(-10, 0, numpy.pi / 4, 0.1, -0.02, 15)
    result = intersection.intersect(spiral1, offset1, spiral2, offset2)
    assert len(result.s1) == 1
    check_points_coincide(spiral1, offset1, spiral2, offset2, result)
    swapped = intersection.intersect(spiral2, offset2, spiral1, offset1)
    assert numpy.allclose(swapped.s1, result.s2, atol=1e-7)
    assert numpy.allclose(swapped.s2, result.s1, atol=1e-7)

def test_degenerate_curve():
    with pytest.raises(clothoid.DegenerateCurveError):
        intersection.intersect(curve(0, 0, 0, 0, 0, 0), 0, X_AXIS, 0)
    with pytest.raises(clothoid.DegenerateCurveError):
        intersection.intersect(X_AXIS, 0, curve(0, 0, numpy.nan, 0, 0, 1), 0)

def test_intersect_clothoids():
    params = dict(x0=5, y0=-5, theta0=numpy.pi/2, kappa=0, dkappa=0, L=10)
    s1, s2 = intersection.intersect_clothoids((0, 0, 0, 0, 0, 10), 0, params, 0)
    assert numpy.allclose(s1, [5])
    assert numpy.allclose(s2, [5])
    s1, s2 = intersection.intersect_clothoids(X_AXIS, 0, params, 0, max_iter=20, tolerance=1e-10)
    assert numpy.allclose(s1, [15])
    assert numpy.allclose(s2, [5])

@pytest.mark.parametrize('kws', [dict(max_iter=0), dict(max_iter=2.5), dict(tolerance=0), dict(tolerance=-1)])
def test_intersect_clothoids_invalid(kws):
    with pytest.raises(ValueError):
        intersection.intersect_clothoids(X_AXIS, 0, X_AXIS, 1, **kws)
