import numpy as np
import pytest

from gnsslab.gnss_types import InvalidSolver
from gnsslab.kalman import KalmanFilter


def test_scalar_update_worked_example():
    kf = KalmanFilter([0.0], [[1.0]])
    kf.compute([[1.0]], [[0.0]], [2.0], [[1.0]], [[1.0]])
    assert kf.xhat[0] == pytest.approx(1.0)
    assert kf.P[0, 0] == pytest.approx(0.5)


def test_time_update_propagates_state_and_covariance():
    kf = KalmanFilter([1.0, 2.0], np.eye(2))
    phi = np.array([[1.0, 1.0], [0.0, 1.0]])
    q = np.eye(2) * 0.1
    kf.time_update(phi, q)
    np.testing.assert_allclose(kf.xhatminus, phi @ np.array([1.0, 2.0]))
    np.testing.assert_allclose(kf.Pminus, phi @ phi.T + q)
    # The a posteriori state is left alone by a prediction.
    np.testing.assert_allclose(kf.xhat, [1.0, 2.0])


def test_heavy_measurement_pulls_state_to_measurement():
    kf = KalmanFilter([0.0, 0.0], np.eye(2) * 10.0)
    kf.time_update(np.eye(2), np.zeros((2, 2)))
    kf.meas_update([3.0, -4.0], np.eye(2), np.eye(2) * 1e9)
    np.testing.assert_allclose(kf.xhat, [3.0, -4.0], atol=1e-6)


def test_zero_weight_keeps_prediction():
    kf = KalmanFilter([5.0], [[2.0]])
    kf.time_update([[1.0]], [[0.0]])
    kf.meas_update([100.0], [[1.0]], [[0.0]])
    np.testing.assert_allclose(kf.xhat, [5.0])
    np.testing.assert_allclose(kf.P, [[2.0]])


def test_update_reduces_covariance_and_keeps_symmetry():
    kf = KalmanFilter([0.0, 0.0, 0.0], np.eye(3) * 4.0)
    h = np.array([[1.0, 0.5, 0.0], [0.0, 1.0, 2.0], [1.0, 1.0, 1.0], [0.3, 0.0, 1.0]])
    kf.compute(np.eye(3), np.eye(3) * 0.01, [1.0, 2.0, 3.0, 0.5], h, np.eye(4))
    np.testing.assert_allclose(kf.P, kf.P.T, atol=1e-12)
    assert np.all(np.diag(kf.P) < np.diag(kf.Pminus))


def test_postfit_residual_matches_state():
    kf = KalmanFilter([0.0, 0.0], np.eye(2))
    h = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    m = np.array([1.0, 2.0, 2.5])
    kf.compute(np.eye(2), np.zeros((2, 2)), m, h, np.eye(3))
    np.testing.assert_allclose(kf.postfit_residual, m - h @ kf.xhat)


def test_augmented_update_equals_stacked_update():
    h = np.array([[1.0, 2.0], [0.5, -1.0]])
    w = np.diag([2.0, 3.0])
    h_aug = np.array([[1.0, 1.0]])
    w_aug = np.array([[5.0]])
    m, m_aug = np.array([1.0, 0.2]), np.array([0.7])

    a = KalmanFilter([0.1, 0.2], np.eye(2))
    a.time_update(np.eye(2), np.eye(2) * 0.5)
    a.meas_update(m, h, w, m_aug, h_aug, w_aug)

    b = KalmanFilter([0.1, 0.2], np.eye(2))
    b.time_update(np.eye(2), np.eye(2) * 0.5)
    b.meas_update(np.concatenate([m, m_aug]), np.vstack([h, h_aug]), np.diag([2.0, 3.0, 5.0]))

    np.testing.assert_allclose(a.xhat, b.xhat)
    np.testing.assert_allclose(a.P, b.P)
    assert a.postfit_residual.shape == (3,)


def test_partial_augmentation_rejected():
    kf = KalmanFilter([0.0], [[1.0]])
    kf.time_update([[1.0]], [[0.0]])
    with pytest.raises(ValueError):
        kf.meas_update([1.0], [[1.0]], [[1.0]], measurements_aug=[1.0])


def test_update_without_prediction_fails():
    kf = KalmanFilter([0.0, 0.0], np.eye(2))
    with pytest.raises(InvalidSolver):
        kf.meas_update([1.0, 1.0], np.eye(2), np.eye(2))


def test_mismatched_transition_fails():
    kf = KalmanFilter([0.0, 0.0], np.eye(2))
    with pytest.raises(InvalidSolver):
        kf.time_update(np.eye(3), np.eye(3))


def test_reset_clears_prediction():
    kf = KalmanFilter([0.0], [[1.0]])
    kf.time_update([[2.0]], [[1.0]])
    kf.reset([7.0, 8.0], np.eye(2) * 3.0)
    np.testing.assert_allclose(kf.xhat, [7.0, 8.0])
    np.testing.assert_allclose(kf.P, np.eye(2) * 3.0)
    np.testing.assert_allclose(kf.xhatminus, [0.0, 0.0])
    np.testing.assert_allclose(kf.Pminus, np.zeros((2, 2)))