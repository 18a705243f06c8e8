import numpy as np
import pytest

from stipplify import Field, InvalidField


def test_from_flat_is_row_major():
    field = Field.from_flat(3, 2, [0.0, 0.1, 0.2, 0.3, 0.4, 0.5])
    assert (field.width, field.height) == (3, 2)
    assert field.weights[1, 0] == pytest.approx(0.3)
    assert field.at(2.9, 0.2) == pytest.approx(0.2)
    assert field.total_weight == pytest.approx(1.5)


def test_weights_are_read_only_copies():
    src = np.full((2, 2), 0.5)
    field = Field(src)
    src[0, 0] = 0.0
    assert field.weights[0, 0] == 0.5
    with pytest.raises(ValueError):
        field.weights[0, 0] = 1.0


def test_at_accepts_arrays():
    field = Field(np.arange(6, dtype=float).reshape(2, 3) / 10)
    got = field.at(np.array([0.5, 2.5, 1.0]), np.array([0.0, 1.9, 1.2]))
    assert np.allclose(got, [0.0, 0.5, 0.4])


@pytest.mark.parametrize(
    "width,height,weights",
    [
        (0, 2, []),
        (2, -1, []),
        (2, 2, [0.1, 0.2, 0.3]),
        (2, 1, [0.5, 1.5]),
        (2, 1, [-0.1, 0.5]),
        (2, 1, [float("nan"), 0.5]),
    ],
)
def test_invalid_fields_are_rejected(width, height, weights):
    with pytest.raises(InvalidField):
        Field.from_flat(width, height, weights)


def test_invalid_field_is_a_value_error():
    with pytest.raises(ValueError):
        Field(np.ones(4))
