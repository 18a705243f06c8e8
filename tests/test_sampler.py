import numpy as np
import pytest

from stipplify import Field, InvalidCount, SamplingExhausted, sample_sites


def test_sites_fill_count_and_stay_in_domain(random_field):
    result = sample_sites(random_field, 200, np.random.default_rng(0))
    pos = result.positions
    assert pos.shape == (200, 2)
    assert np.all(pos[:, 0] >= 0) and np.all(pos[:, 0] < random_field.width)
    assert np.all(pos[:, 1] >= 0) and np.all(pos[:, 1] < random_field.height)
    assert result.exhausted == ()


def test_sites_only_land_on_positive_weight():
    weights = np.zeros((10, 10))
    weights[:, :5] = 1.0
    result = sample_sites(Field(weights), 300, np.random.default_rng(3))
    assert np.all(result.positions[:, 0] < 5.0)


def test_same_seed_same_sites(random_field):
    a = sample_sites(random_field, 50, np.random.default_rng(11))
    b = sample_sites(random_field, 50, np.random.default_rng(11))
    assert np.array_equal(a.positions, b.positions)


def test_zero_field_falls_back_to_uniform_with_warning():
    field = Field(np.zeros((8, 6)))
    with pytest.warns(SamplingExhausted) as record:
        result = sample_sites(field, 5, np.random.default_rng(0), max_attempts=3)
    assert result.exhausted == (0, 1, 2, 3, 4)
    assert record[0].message.site_indices == (0, 1, 2, 3, 4)
    assert np.all(result.positions[:, 0] < 6) and np.all(result.positions[:, 1] < 8)


def test_exhausted_site_index_is_reported(corner_field, constant_rng):
    # every candidate lands on (0.5, 0.5), where the field is empty
    with pytest.warns(SamplingExhausted):
        result = sample_sites(corner_field, 1, constant_rng(0.05), max_attempts=1)
    assert result.exhausted == (0,)
    assert result.positions.tolist() == [[0.5, 0.5]]


@pytest.mark.parametrize("count", [0, -3, 2.5, True, float("nan"), None, "4"])
def test_invalid_counts(uniform_field, count):
    with pytest.raises(InvalidCount):
        sample_sites(uniform_field, count, np.random.default_rng(0))
