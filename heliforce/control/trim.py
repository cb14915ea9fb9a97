"""
Trim Calculation

Least-squares root finding with a finite-difference Jacobian, used to find control
and attitude settings that zero the net force and torque on the aircraft.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Tuple

import numpy as np
from scipy.optimize import least_squares

from archimedes import struct

logger = logging.getLogger(__name__)


@struct(frozen=True)
class TrimResult:
    """
    Outcome of a trim computation.

    Attributes
    ----------
    controls : np.ndarray, shape (4,)
        Collective, longitudinal cyclic, lateral cyclic, pedal (normalized)
    attitude : np.ndarray, shape (2,)
        Roll and pitch angles (rad)
    residual : np.ndarray, shape (6,)
        Final force (N) and torque (N*m) residual
    iterations : int
        Residual evaluations used by the solver
    converged : bool
        True when every residual component is within tolerance
    """

    controls: np.ndarray
    attitude: np.ndarray
    residual: np.ndarray
    iterations: int
    converged: bool


class TrimError(RuntimeError):
    """Raised when a strict trim does not converge."""

    def __init__(self, result: TrimResult):
        super().__init__(
            f"Trim did not converge after {result.iterations} evaluations, "
            f"residual {np.array2string(result.residual, precision=4)}")
        self.result = result


class JacobianTrimmer:
    """
    Root finder for trim residuals built on ``scipy.optimize.least_squares``.

    The Jacobian is estimated by forward differences. Convergence is judged
    per component against the caller's tolerance, not by the optimizer's
    own termination status.

    Parameters
    ----------
    max_iterations : int
        Maximum number of residual evaluations, excluding those spent on the
        finite-difference Jacobian
    ftol, xtol, gtol : float
        Termination tolerances passed to ``least_squares``
    """

    def __init__(self,
                 max_iterations: int = 200,
                 ftol: float = 1e-12,
                 xtol: float = 1e-12,
                 gtol: float = 1e-12):
        self.max_iterations = max_iterations
        self.ftol = ftol
        self.xtol = xtol
        self.gtol = gtol

    def trim(self,
             x: np.ndarray,
             tolerance: np.ndarray,
             f: Callable[[np.ndarray], np.ndarray]) -> Tuple[bool, np.ndarray, int]:
        """
        Drive f(x) to zero.

        The guess vector x is updated in place. f is evaluated once more at
        the returned x, so stateful residual functions are left at the
        solution rather than at a Jacobian perturbation.

        Parameters
        ----------
        x : np.ndarray
            Initial guess, overwritten with the result
        tolerance : np.ndarray
            Convergence threshold for each component of f
        f : callable
            Residual function

        Returns
        -------
        converged : bool
            True when |f_i(x)| < tolerance_i for all i
        residual : np.ndarray
            f(x) at the returned x
        iterations : int
            Residual evaluations used by the optimizer
        """
        result = least_squares(
            lambda xi: np.asarray(f(xi), dtype=float),
            x.copy(),
            jac='2-point',
            ftol=self.ftol,
            xtol=self.xtol,
            gtol=self.gtol,
            max_nfev=self.max_iterations,
            verbose=0
        )
        logger.debug("least_squares finished after %d evaluations: %s",
                     result.nfev, result.message)

        x[:] = result.x
        fx = np.asarray(f(x), dtype=float)
        converged = bool(np.all(np.abs(fx) < tolerance))
        return converged, fx, result.nfev


@contextmanager
def override_attributes(*overrides):
    """
    Temporarily set attributes, restoring the originals on exit.

    Parameters
    ----------
    *overrides : tuple of (object, str, value)
        Attribute assignments applied on entry

    Examples
    --------
    >>> with override_attributes((fcs, 'enabled', False)):
    ...     run_quasi_static()
    """
    saved = [(obj, name, getattr(obj, name)) for obj, name, _ in overrides]
    try:
        for obj, name, value in overrides:
            setattr(obj, name, value)
        yield
    finally:
        for obj, name, value in reversed(saved):
            setattr(obj, name, value)
