# pylint: disable=no-self-use
import math

import numpy as np
import pytest
from scipy.integrate import quad

from hadrodecay.kinematics import (
    Tabulation,
    blatt_weisskopf_sqr,
    breakup_momentum,
    breakup_momentum_squared,
    breit_wigner,
    breit_wigner_nonrel,
    cauchy,
    post_ff_sqr,
    sample_cauchy,
)


class TestBreakupMomentum:
    @pytest.mark.parametrize(
        "m_r, m_a, m_b, expected",
        [
            (1.0, 0.0, 0.0, 0.5),
            (2.0, 1.0, 0.0, 0.75),
            (1.232, 0.938, 0.138, 0.22816),
        ],
    )
    def test_values(self, m_r, m_a, m_b, expected):
        assert breakup_momentum(m_r, m_a, m_b) == pytest.approx(
            expected, abs=1e-4
        )

    @staticmethod
    def test_below_threshold():
        assert breakup_momentum_squared(0.2, 0.138, 0.138) < 0.0
        assert breakup_momentum(0.2, 0.138, 0.138) == 0.0
        assert breakup_momentum(0.276, 0.138, 0.138) == 0.0


class TestBlattWeisskopf:
    @pytest.mark.parametrize("angular_momentum", range(5))
    def test_limits(self, angular_momentum):
        if angular_momentum == 0:
            assert blatt_weisskopf_sqr(0.0, 0) == 1.0
        else:
            assert blatt_weisskopf_sqr(0.0, angular_momentum) == 0.0
        assert blatt_weisskopf_sqr(
            1e3, angular_momentum
        ) == pytest.approx(1.0, rel=1e-3)

    @staticmethod
    def test_monotonic():
        momenta = np.linspace(0.0, 2.0, 50)
        for angular_momentum in range(1, 5):
            values = [blatt_weisskopf_sqr(p, angular_momentum) for p in momenta]
            assert all(np.diff(values) >= 0.0)

    @staticmethod
    def test_interaction_radius():
        assert blatt_weisskopf_sqr(0.2, 1, 2.0) > blatt_weisskopf_sqr(
            0.2, 1, 1.0
        )

    @staticmethod
    def test_exceptions():
        with pytest.raises(ValueError):
            blatt_weisskopf_sqr(0.2, 5)


class TestFormFactor:
    @staticmethod
    def test_one_at_pole():
        assert post_ff_sqr(1.232, 1.232, 1.076, 2.0) == pytest.approx(1.0)

    @staticmethod
    def test_suppression():
        assert post_ff_sqr(3.0, 1.232, 1.076, 2.0) < 1.0
        assert post_ff_sqr(3.0, 1.232, 1.076, 0.6) < post_ff_sqr(
            3.0, 1.232, 1.076, 2.0
        )


class TestLineshapes:
    @staticmethod
    def test_breit_wigner_normalization():
        integral, _ = quad(
            breit_wigner,
            0.0,
            1e3,
            args=(0.776, 0.149),
            points=[0.776],
            limit=200,
        )
        assert integral == pytest.approx(1.0, rel=1e-3)

    @staticmethod
    def test_breit_wigner_peak():
        assert breit_wigner(0.776, 0.776, 0.149) == pytest.approx(
            2.0 / (math.pi * 0.149)
        )

    @staticmethod
    def test_cauchy():
        integral, _ = quad(
            cauchy, -1e3, 1e3, args=(1.0, 0.05), points=[1.0], limit=200
        )
        assert integral == pytest.approx(1.0, rel=1e-3)
        assert breit_wigner_nonrel(1.0, 1.0, 0.1) == cauchy(1.0, 1.0, 0.05)

    @staticmethod
    def test_sample_cauchy():
        rng = np.random.default_rng(0)
        samples = np.array(
            [sample_cauchy(rng, 1.232, 0.0585, 1.1, 1.5) for _ in range(2000)]
        )
        assert samples.min() >= 1.1
        assert samples.max() <= 1.5
        assert np.median(samples) == pytest.approx(1.232, abs=0.02)


class TestTabulation:
    @staticmethod
    def test_interpolation():
        tabulation = Tabulation(1.0, 2.0, 21, lambda x: 2.0 * x + 1.0)
        assert tabulation.x_min == 1.0
        assert tabulation.x_max == 3.0
        assert tabulation(1.0) == pytest.approx(3.0)
        assert tabulation(2.05) == pytest.approx(5.1)
        assert tabulation(3.0) == pytest.approx(7.0)

    @staticmethod
    def test_clamping():
        tabulation = Tabulation(0.0, 1.0, 11, lambda x: x * x)
        assert tabulation(-5.0) == 0.0
        assert tabulation(5.0) == pytest.approx(1.0)
