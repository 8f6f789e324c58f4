"""
Configuration constants for capsule fitting.

Configuration includes:
- GEOMETRY_EPS: guard for zero-length segments, zero directions and zero distances
- CONTAINMENT_TOLERANCE: slack allowed when checking that a capsule bounds its points
- DEFAULT_FITTING_CONFIG: default parameters for the SLSQP and L-BFGS capsule refiners
"""

# Segments shorter than this are treated as a single point, and distances
# below it are treated as zero when normalizing gradient directions.
GEOMETRY_EPS = 1e-12

# Absolute slack (in input units) when verifying that every point lies inside a capsule
CONTAINMENT_TOLERANCE = 1e-6

# Default optimizer parameters. Keys match the keyword arguments of
# CapsuleFitter ("slsqp") and TorchCapsuleFitter ("lbfgs").
DEFAULT_FITTING_CONFIG = {
    "slsqp": {
        "maxiter": 200,  # Maximum SLSQP iterations
        "ftol": 1e-10,  # Objective tolerance passed to scipy
        "tolerance": CONTAINMENT_TOLERANCE,  # Feasibility slack when verifying the optimum
    },
    "lbfgs": {
        "lbfgs_epochs": 50,  # Number of outer L-BFGS steps
        "lbfgs_lr": 1.0,  # Learning rate for L-BFGS
        "penalty": 1e3,  # Weight of the squared containment violation
        "restart_interval": 10,  # Recreate the L-BFGS optimizer every n steps
        "dtype": "float64",  # Torch dtype used during optimization
        "device": "cpu",
    },
}
