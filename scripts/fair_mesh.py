#!/usr/bin/env python3
"""
Command-line driver for the fairing engine.

Loads a mesh, runs one operation, prints curvature statistics before and
after, and optionally writes the result.

Usage:
    python3 scripts/fair_mesh.py data/bunny.off --operation implicit --output out/bunny.ply
"""

import argparse
import logging
import os
import sys

import numpy as np

# Add project root to path so we can import from src
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.fairing import FairingConfig, MeshProcessing
from src.fairing.io import write_mesh
from src.fairing.logging_config import setup_logging

OPERATIONS = ['curvature', 'uniform-smooth', 'smooth', 'uniform-enhance', 'enhance', 'implicit', 'minimal']


def summarize(processor: MeshProcessing) -> dict:
    props = processor.mesh.vertex_props
    summary = {'surface_area': processor.mesh.surface_area()}
    for name in ('v:unicurvature', 'v:curvature', 'v:gauss_curvature'):
        values = props.get(name)
        summary[name] = (float(np.mean(values)), float(np.std(values)))
    return summary


def print_summary(title: str, summary: dict) -> None:
    print(f"{title}:")
    print(f"  surface area          : {summary['surface_area']:.6g}")
    for name in ('v:unicurvature', 'v:curvature', 'v:gauss_curvature'):
        mean, std = summary[name]
        print(f"  {name:<22}: mean {mean:.6g}, std {std:.6g}")


def run(processor: MeshProcessing, args) -> bool:
    config = processor.config
    iterations = args.iterations if args.iterations is not None else config.default_iterations
    coefficient = args.coefficient if args.coefficient is not None else config.default_coefficient

    if args.operation == 'uniform-smooth':
        processor.uniform_smooth(iterations)
    elif args.operation == 'smooth':
        processor.smooth(iterations)
    elif args.operation == 'uniform-enhance':
        processor.uniform_laplacian_enhance_feature(iterations, coefficient)
    elif args.operation == 'enhance':
        processor.laplace_beltrami_enhance_feature(iterations, coefficient)
    elif args.operation == 'implicit':
        timestep = args.timestep if args.timestep is not None else config.default_timestep
        report = processor.implicit_smoothing(timestep * processor.dist_max ** 2)
        print(f"Implicit smoothing: {report.message} (residual {report.residual:.3g})")
        if not report:
            return False
    elif args.operation == 'minimal':
        report = processor.minimal_surface()
        print(f"Minimal surface: {report.message} (area before {report.surface_area:.6g})")
        if not report:
            return False
    return True


def main():
    parser = argparse.ArgumentParser(description='Curvature analysis and fairing of triangle meshes')
    parser.add_argument('input', help='Input mesh (any format PyVista reads)')
    parser.add_argument('--output', help='Where to save the processed mesh')
    parser.add_argument('--operation', choices=OPERATIONS, default='curvature',
                        help='Operation to run (default: curvature)')
    parser.add_argument('--iterations', type=int, help='Smoothing iterations')
    parser.add_argument('--coefficient', type=float, help='Feature enhancement coefficient')
    parser.add_argument('--timestep', type=float,
                        help='Implicit smoothing time step, relative to the squared model radius')
    parser.add_argument('--damping', type=float, help='Explicit smoothing damping factor')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--log-file', help='Also write the log to this file')

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        config = FairingConfig().with_overrides(damping=args.damping)
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        sys.exit(2)

    try:
        processor = MeshProcessing.from_file(args.input, config=config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Could not load mesh, exiting: {e}")
        sys.exit(1)

    print_summary("Input", summarize(processor))

    try:
        ok = run(processor, args)
    except ValueError as e:
        print(f"Invalid arguments: {e}")
        sys.exit(2)
    if not ok:
        sys.exit(1)

    if args.operation != 'curvature':
        processor.compute_mesh_properties()
        print_summary("Output", summarize(processor))

    if args.output:
        write_mesh(processor.mesh, args.output)
        print(f"Mesh saved to {args.output}")


if __name__ == "__main__":
    main()
