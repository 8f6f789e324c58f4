#!/usr/bin/env python
"""Fit a bounding capsule to one or more meshes (e.g. the links of a robot arm).

Each mesh is reduced to its convex hull, the hulls are merged, and the PCA
bounding capsule is computed. With --optimize the capsule is then shrunk to
the minimum-volume capsule that still contains every hull vertex.

Usage:
    python scripts/fit_capsule.py link1.stl link2.stl
    python scripts/fit_capsule.py link.stl --optimize slsqp --output capsule.json
    python scripts/fit_capsule.py link.stl --optimize lbfgs --save-mesh capsule.vtk
"""

import argparse
import json
import logging
import sys

import capfit
from capfit.fitting import compute_bounding_capsule_polyhedron
from capfit.optimization import CapsuleFitter, TorchCapsuleFitter
from capfit.utils import capsule_to_dict, create_capsule_polydata, load_polyhedrons

logger = logging.getLogger("capfit.scripts.fit_capsule")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Fit a bounding capsule to mesh files.")
    parser.add_argument("meshes", nargs="+", help="Mesh files readable by pyvista")
    parser.add_argument("--optimize", choices=["none", "slsqp", "lbfgs"], default="none",
                        help="Refine the PCA capsule with an optimizer")
    parser.add_argument("--output", default=None, help="Write the capsule as JSON to this path")
    parser.add_argument("--save-mesh", default=None, help="Write the capsule surface to this mesh path")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    capfit.configure_logging(args.log_level)

    polyhedrons = load_polyhedrons(args.meshes)
    capsule = compute_bounding_capsule_polyhedron(polyhedrons)
    logger.info(f"PCA capsule: {capsule} (volume {capsule.volume:.6g})")

    if args.optimize == "slsqp":
        capsule = CapsuleFitter(polyhedrons).compute_best_fit_capsule(initial=capsule)
    elif args.optimize == "lbfgs":
        points = capfit.hull.convert_polyhedron_vector_to_polyhedron(polyhedrons)
        capsule = TorchCapsuleFitter().fit(points, initial=capsule)

    result = capsule_to_dict(capsule)
    result["volume"] = capsule.volume

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result, f, indent=2)
        logger.info(f"Wrote capsule to {args.output}")
    else:
        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")

    if args.save_mesh:
        create_capsule_polydata(capsule).save(args.save_mesh)
        logger.info(f"Wrote capsule mesh to {args.save_mesh}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
