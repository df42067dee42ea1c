"""Kalman filter in information form, used for sequential GNSS estimation."""

from __future__ import annotations

import numpy as np

from gnsslab.gnss_types import InvalidSolver


def _vector(values) -> np.ndarray:
    return np.atleast_1d(np.asarray(values, dtype=float)).copy()


def _matrix(values) -> np.ndarray:
    return np.atleast_2d(np.asarray(values, dtype=float)).copy()


class KalmanFilter:
    """Kalman filter without control input.

    ``xhat`` and ``P`` hold the a posteriori state and covariance,
    ``xhatminus`` and ``Pminus`` the a priori ones, and ``postfit_residual``
    the residuals of the last measurement update.
    """

    def __init__(self, initial_state, initial_covariance):
        self.reset(initial_state, initial_covariance)

    def reset(self, initial_state, initial_covariance) -> None:
        """Set a new initial state and a posteriori covariance."""
        self.xhat = _vector(initial_state)
        self.P = _matrix(initial_covariance)
        self.xhatminus = np.zeros_like(self.xhat)
        self.Pminus = np.zeros_like(self.P)
        self.postfit_residual = np.zeros(0)

    def time_update(self, phi, q) -> None:
        """Predict the a priori state and covariance."""
        phi = _matrix(phi)
        q = _matrix(q)
        try:
            xhatminus = phi @ self.xhat
            pminus = phi @ self.P @ phi.T + q
        except ValueError as exc:
            raise InvalidSolver("Predict(): Unable to predict next state.") from exc
        self.xhatminus = xhatminus
        self.Pminus = pminus

    def meas_update(self, measurements, h, w,
                    measurements_aug=None, h_aug=None, w_aug=None) -> None:
        """Correct the prediction with measurements of weight matrix ``w``.

        Optional augmented measurements, with their own design and weight
        matrices, are stacked below the main ones and treated as uncorrelated.
        """
        m = _vector(measurements)
        h = _matrix(h)
        w = _matrix(w)
        extra = (measurements_aug, h_aug, w_aug)
        if any(part is not None for part in extra):
            if any(part is None for part in extra):
                raise ValueError("augmented measurements need vector, design and weight")
            m_aug = _vector(measurements_aug)
            h_aug = _matrix(h_aug)
            w_aug = _matrix(w_aug)
            n, k = m.size, m_aug.size
            try:
                h = np.vstack([h, h_aug])
            except ValueError as exc:
                raise InvalidSolver("Correct(): design matrices do not match.") from exc
            w_ext = np.zeros((n + k, n + k))
            w_ext[:n, :n] = w
            w_ext[n:, n:] = w_aug
            m = np.concatenate([m, m_aug])
            w = w_ext
        self._correct(m, h, w)

    def compute(self, phi, q, measurements, h, w) -> None:
        """Run a time update followed by a measurement update."""
        self.time_update(phi, q)
        self.meas_update(measurements, h, w)

    def _correct(self, m: np.ndarray, h: np.ndarray, w: np.ndarray) -> None:
        try:
            inv_pminus = np.linalg.inv(self.Pminus)
            htw = h.T @ w
            p = np.linalg.inv(htw @ h + inv_pminus)
            xhat = p @ (htw @ m + inv_pminus @ self.xhatminus)
            residual = m - h @ xhat
        except (np.linalg.LinAlgError, ValueError) as exc:
            raise InvalidSolver("Correct(): Unable to compute xhat.") from exc
        self.P = p
        self.xhat = xhat
        self.postfit_residual = residual