"""
Best-fit capsule refinement.

Both refiners start from the PCA bounding capsule (``capfit.fitting``) and
shrink it while keeping every point inside:

    minimize    Volume(x)
    subject to  DistanceCapsulePoint_q(x) <= 0   for every vertex q
                radius >= 0

Example usage with scipy SLSQP (exact constraints, analytic gradients):
    fitter = CapsuleFitter([link_hull_1, link_hull_2])
    capsule = fitter.compute_best_fit_capsule()

Example usage with torch L-BFGS (penalty formulation, autograd):
    fitter = TorchCapsuleFitter(lbfgs_epochs=100, penalty=1e4)
    capsule = fitter.fit(points)

Neither refiner returns a capsule that leaves a point outside: the SLSQP
result is verified and rejected with ``FittingError`` when infeasible, and
the L-BFGS result has its radius inflated to cover the worst violation.
"""

import logging

import numpy as np
import torch
from scipy.optimize import minimize

from .capsule import Capsule
from .config import DEFAULT_FITTING_CONFIG
from .fitting import (
    capsule_from_points,
    capsule_signed_distances,
    check_capsule,
    compute_bounding_capsule_polyhedron,
)
from .functions import DistanceCapsulePoint, Volume
from .geometry import distances_points_to_segment
from .hull import compute_convex_polyhedron, convert_polyhedron_vector_to_polyhedron
from .parameters import capsule_to_solver_param, convert_solver_param_to_capsule
from .schemas import FittingError, validate_points, validate_polyhedrons
from .signed_distances import capsule_volume, sd_capsule

logger = logging.getLogger(__name__)  # This will be 'capfit.optimization'

_SLSQP_DEFAULTS = DEFAULT_FITTING_CONFIG["slsqp"]
_LBFGS_DEFAULTS = DEFAULT_FITTING_CONFIG["lbfgs"]


class CapsuleFitter:
    """Minimum-volume capsule around a polyhedron collection using scipy SLSQP.

    Args:
        polyhedrons: Sequence of (N_i, 3) vertex arrays.
        maxiter: Maximum SLSQP iterations.
        ftol: SLSQP objective tolerance.
        tolerance: Containment slack used to verify the optimum.
        use_convex_hull: If True, constrain only the vertices of the convex
            hull of the union (same capsule, fewer constraints). Requires a
            non-degenerate 3D point set.
    """

    def __init__(self, polyhedrons, maxiter=_SLSQP_DEFAULTS["maxiter"], ftol=_SLSQP_DEFAULTS["ftol"],
                 tolerance=_SLSQP_DEFAULTS["tolerance"], use_convex_hull=True):
        self.polyhedrons = validate_polyhedrons(polyhedrons)
        self.maxiter = maxiter
        self.ftol = ftol
        self.tolerance = tolerance

        if use_convex_hull:
            self.points = compute_convex_polyhedron(self.polyhedrons)[0]
        else:
            self.points = convert_polyhedron_vector_to_polyhedron(self.polyhedrons)

        self.objective = Volume()
        self.constraints = [
            DistanceCapsulePoint(q, name=f"distance to vertex {i}") for i, q in enumerate(self.points)
        ]

        self.initial_capsule = None
        self.solver_result = None

    def _constraint_values(self, x):
        # scipy "ineq" constraints are g(x) >= 0, i.e. -distance >= 0
        return -np.array([c.value(x) for c in self.constraints])

    def _constraint_jacobian(self, x):
        return -np.vstack([c.gradient(x) for c in self.constraints])

    def compute_best_fit_capsule(self, initial=None):
        """
        Run the optimization and return the best-fit capsule.

        Args:
            initial: Initial Capsule. Defaults to the PCA bounding capsule
                of the input polyhedrons, fitted over all of their vertices
                rather than only the hull vertices.

        Returns:
            Capsule: Optimized capsule containing every vertex.

        Raises:
            FittingError: If the solver ends on a capsule that leaves a
                vertex outside by more than `tolerance`.
        """
        if initial is None:
            initial = compute_bounding_capsule_polyhedron(self.polyhedrons)
        self.initial_capsule = initial

        x0 = capsule_to_solver_param(initial)
        bounds = [(None, None)] * 6 + [(0.0, None)]
        logger.info(
            f"Starting SLSQP capsule fit with {len(self.constraints)} constraints, "
            f"initial volume {self.objective.value(x0):.6g}"
        )

        result = minimize(
            self.objective.value,
            x0,
            jac=self.objective.gradient,
            method="SLSQP",
            bounds=bounds,
            constraints=[{"type": "ineq", "fun": self._constraint_values, "jac": self._constraint_jacobian}],
            options={"maxiter": self.maxiter, "ftol": self.ftol},
        )
        self.solver_result = result

        p0, p1, radius = convert_solver_param_to_capsule(result.x)
        capsule = Capsule(p0, p1, max(radius, 0.0))

        if not check_capsule(capsule, self.points, tolerance=self.tolerance):
            worst = float(capsule_signed_distances(capsule, self.points).max())
            raise FittingError(
                f"SLSQP returned a capsule that misses vertices by up to {worst:.6g} "
                f"(tolerance {self.tolerance}): {result.message}"
            )

        if not result.success:
            logger.warning(f"SLSQP did not converge ({result.message}); returning feasible iterate")

        logger.info(
            f"SLSQP finished after {result.nit} iterations: volume {initial.volume:.6g} -> {capsule.volume:.6g}"
        )
        return capsule


class TorchCapsuleFitter:
    """Capsule refinement with torch L-BFGS on a penalized volume.

    The loss is ``volume + penalty * mean(relu(sdf)^2)`` evaluated on points
    normalized to unit scale. After optimization the radius is grown to the
    largest point distance, so the returned capsule always contains the
    points. If that capsule is larger than the initial one, the initial
    capsule is returned.

    Args:
        lbfgs_epochs: Number of outer L-BFGS steps.
        lbfgs_lr: L-BFGS learning rate.
        penalty: Weight of the squared containment violation.
        restart_interval: Recreate the L-BFGS optimizer every n steps.
        dtype: Torch dtype name.
        device: Torch device.
    """

    def __init__(self, lbfgs_epochs=_LBFGS_DEFAULTS["lbfgs_epochs"], lbfgs_lr=_LBFGS_DEFAULTS["lbfgs_lr"],
                 penalty=_LBFGS_DEFAULTS["penalty"], restart_interval=_LBFGS_DEFAULTS["restart_interval"],
                 dtype=_LBFGS_DEFAULTS["dtype"], device=_LBFGS_DEFAULTS["device"]):
        self.lbfgs_epochs = lbfgs_epochs
        self.lbfgs_lr = lbfgs_lr
        self.penalty = penalty
        self.restart_interval = max(1, restart_interval)
        self.dtype = getattr(torch, dtype)
        self.device = device

        self.initial_capsule = None
        self.loss_history = []

    def _compute_loss(self, x, p0, p1, radius):
        # |radius| keeps the volume term bounded below
        r = radius.abs()
        sdf = sd_capsule(x, p0, p1, r)
        violation = torch.relu(sdf) ** 2
        return capsule_volume(p0, p1, r) + self.penalty * violation.mean()

    def fit(self, points, initial=None):
        """
        Fit a capsule to `points`.

        Args:
            points: (N, 3) array of points.
            initial: Initial Capsule; defaults to `capsule_from_points(points)`.

        Returns:
            Capsule: Capsule containing every point.
        """
        points = validate_points(points)
        if initial is None:
            initial = capsule_from_points(points)
        self.initial_capsule = initial
        self.loss_history = []

        # Normalize to unit scale so the penalty weight is unit-free
        center = points.mean(axis=0)
        scale = float(np.linalg.norm(points - center, axis=1).max())
        if scale <= 0:
            logger.info("All points coincide; keeping initial capsule")
            return initial

        def to_tensor(arr):
            return torch.as_tensor(arr, dtype=self.dtype, device=self.device)

        x = to_tensor((points - center) / scale)
        p0 = torch.nn.Parameter(to_tensor((initial.P0 - center) / scale))
        p1 = torch.nn.Parameter(to_tensor((initial.P1 - center) / scale))
        radius = torch.nn.Parameter(to_tensor(initial.radius / scale))
        parameters = [p0, p1, radius]

        with torch.no_grad():
            initial_loss = self._compute_loss(x, p0, p1, radius).item()
        logger.info(f"L-BFGS capsule fit starting loss: {initial_loss:.6f}")

        for lbfgs_step in range(self.lbfgs_epochs):
            if lbfgs_step % self.restart_interval == 0:
                logger.debug(f"(Re)starting L-BFGS optimizer at step {lbfgs_step}")
                lbfgs_opt = torch.optim.LBFGS(parameters, lr=self.lbfgs_lr,
                                              max_iter=20, max_eval=25,
                                              tolerance_grad=1e-9, tolerance_change=1e-12,
                                              history_size=100, line_search_fn="strong_wolfe")

            def closure():
                lbfgs_opt.zero_grad()
                loss = self._compute_loss(x, p0, p1, radius)
                loss.backward()
                return loss

            current_loss = lbfgs_opt.step(closure).item()
            self.loss_history.append(current_loss)

            if lbfgs_step % 10 == 0 or lbfgs_step < 5:
                logger.debug(f"L-BFGS step {lbfgs_step + 1}/{self.lbfgs_epochs}: loss={current_loss:.6f}")

            if not np.isfinite(current_loss):
                logger.warning(f"L-BFGS stopping at step {lbfgs_step} due to non-finite loss")
                break

        with torch.no_grad():
            p0_fit = p0.detach().cpu().numpy() * scale + center
            p1_fit = p1.detach().cpu().numpy() * scale + center
            radius_fit = abs(radius.item()) * scale

        if not (np.all(np.isfinite(p0_fit)) and np.all(np.isfinite(p1_fit)) and np.isfinite(radius_fit)):
            logger.warning("L-BFGS produced non-finite parameters; keeping initial capsule")
            return initial

        # Grow the radius so no point is left outside
        radius_fit = max(radius_fit, float(distances_points_to_segment(points, p0_fit, p1_fit).max()))
        capsule = Capsule(p0_fit, p1_fit, radius_fit)

        if capsule.volume > initial.volume:
            logger.info(
                f"L-BFGS capsule volume {capsule.volume:.6g} exceeds initial {initial.volume:.6g}; keeping initial"
            )
            return initial

        logger.info(f"L-BFGS capsule fit: volume {initial.volume:.6g} -> {capsule.volume:.6g}")
        return capsule
