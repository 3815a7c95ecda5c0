import numpy as np

from lufs_meter.weighting import filter_block, weighting_coefficients


def _direct_form(samples, sample_rate):
    ratio = sample_rate / 48_000
    b0, b1, b2 = 0.85319059207939, -1.70638118415879, 0.85319059207939
    a1, a2 = -1.69065929318241 * ratio, 0.73248077421585 * ratio
    x1 = x2 = y1 = y2 = 0.0
    out = []
    for x in samples:
        y = b0 * x + b1 * x1 + b2 * x2 - a1 * y1 - a2 * y2
        x2, x1 = x1, x
        y2, y1 = y1, y
        out.append(y)
    return np.asarray(out)


def test_filter_block_matches_difference_equation():
    rng = np.random.default_rng(7)
    block = rng.uniform(-0.5, 0.5, 4_410)

    filtered = filter_block(block, 44_100)

    assert filtered.shape == block.shape
    assert np.allclose(filtered, _direct_form(block, 44_100), rtol=1e-9, atol=1e-12)


def test_filter_block_starts_from_zero_state_every_call():
    rng = np.random.default_rng(11)
    first = rng.uniform(-0.5, 0.5, 4_800)
    second = rng.uniform(-0.5, 0.5, 4_800)

    joined = filter_block(np.concatenate((first, second)), 48_000)
    separate = filter_block(second, 48_000)

    assert np.allclose(joined[:4_800], filter_block(first, 48_000))
    assert not np.allclose(joined[4_800:], separate)
    assert np.array_equal(filter_block(second, 48_000), separate)


def test_coefficients_scale_feedback_with_sample_rate():
    b_ref, a_ref = weighting_coefficients(48_000)
    b_low, a_low = weighting_coefficients(24_000)

    assert np.array_equal(b_ref, b_low)
    assert a_low[0] == 1.0
    assert np.allclose(a_low[1:], a_ref[1:] * 0.5)


def test_filter_block_empty_input():
    assert filter_block(np.array([]), 48_000).size == 0
