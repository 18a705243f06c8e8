import numpy as np
import pytest

from stipplify import DelaunaySiteIndex, Field, relax_once


def test_stranded_site_keeps_its_position():
    weights = np.zeros((10, 10))
    weights[:, :2] = 1.0
    positions = np.array([[0.2, 3.0], [9.0, 5.0]])

    new, metric, stranded, acc = relax_once(Field(weights), positions, DelaunaySiteIndex)

    assert acc.weight_sums[1] == 0.0
    assert new[1].tolist() == [9.0, 5.0]
    assert new[0].tolist() == pytest.approx([1.0, 5.0])
    assert stranded == 1
    assert metric == pytest.approx(0.8**2 + 2.0**2)
    assert positions.tolist() == [[0.2, 3.0], [9.0, 5.0]]


def test_single_site_reaches_a_fixed_point(random_field):
    positions = np.array([[0.0, 0.0]])
    first, m1, _, _ = relax_once(random_field, positions, DelaunaySiteIndex)
    second, m2, _, _ = relax_once(random_field, first, DelaunaySiteIndex)

    ys, xs = np.nonzero(random_field.weights)
    w = random_field.weights[ys, xs]
    centroid = [np.sum(w * (xs + 0.5)) / w.sum(), np.sum(w * (ys + 0.5)) / w.sum()]
    assert first[0].tolist() == pytest.approx(centroid)
    assert m1 > 0
    assert second[0].tolist() == pytest.approx(first[0].tolist())
    assert m2 == pytest.approx(0.0, abs=1e-20)


def test_metric_is_max_squared_displacement(uniform_field):
    positions = np.array([[2.5, 5.0], [7.5, 5.0]])
    new, metric, stranded, _ = relax_once(uniform_field, positions, DelaunaySiteIndex)
    disp = ((new - positions) ** 2).sum(axis=1)
    assert metric == pytest.approx(disp.max())
    assert stranded == 0
