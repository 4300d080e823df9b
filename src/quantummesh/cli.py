"""
Command-line entry point.

    quantummesh simulate circuit.json [--optimize] [--config cfg.yaml] [--shots N]
    quantummesh optimize circuit.json [--output optimized.json]
    quantummesh benchmark 20
    quantummesh visualize circuit.json
    quantummesh version

Engine errors are logged and turned into exit status 1 here; nothing below
this module exits the process.
"""

import argparse
from pathlib import Path
from typing import List, Optional
import logging

from pydantic import ValidationError
import yaml

from quantummesh import __version__
from quantummesh.circuits.generator import benchmark_circuit
from quantummesh.circuits.optimizer import CircuitOptimizer
from quantummesh.config import Config
from quantummesh.errors import QuantumMeshError
from quantummesh.io.formats import read_circuit, write_circuit
from quantummesh.reporting import (
    format_circuit,
    format_counts,
    format_optimization,
    format_probabilities,
)
from quantummesh.sim.simulator import Simulator
from quantummesh.utils.logging_setup import configure_logging, setup_logger
from quantummesh.utils.perf import PerformanceProfiler, estimate_memory_requirements

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with one subcommand per action."""
    parser = argparse.ArgumentParser(
        prog="quantummesh",
        description="State-vector quantum circuit simulator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (overrides the config file)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional log file path (in addition to console)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Use JSON-structured logging format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="Run a circuit file")
    simulate.add_argument("circuit", type=Path, help="Circuit JSON file")
    simulate.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file",
    )
    simulate.add_argument(
        "--optimize",
        action="store_true",
        help="Run the peephole optimizer before simulating",
    )
    simulate.add_argument(
        "--shots",
        type=int,
        default=None,
        help="Also sample this many measurement outcomes",
    )
    simulate.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of basis states to print",
    )

    optimize = subparsers.add_parser("optimize", help="Cancel adjacent self-inverse gates")
    optimize.add_argument("circuit", type=Path, help="Circuit JSON file")
    optimize.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the optimized circuit to this file",
    )

    benchmark = subparsers.add_parser("benchmark", help="Time an H layer plus CNOT ladder")
    benchmark.add_argument("qubits", type=int, help="Register width")
    benchmark.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file",
    )

    visualize = subparsers.add_parser("visualize", help="Print a circuit summary")
    visualize.add_argument("circuit", type=Path, help="Circuit JSON file")
    visualize.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of gates to list",
    )

    subparsers.add_parser("version", help="Print the version")

    return parser


def _load_config(path: Optional[Path]) -> Config:
    if path is None:
        return Config()
    config = Config.from_yaml(path)
    logger.info(f"Configuration loaded from {path}")
    return config


def cmd_simulate(args: argparse.Namespace, config: Config) -> int:
    circuit = read_circuit(args.circuit)
    logger.info(
        f"Circuit loaded: {circuit.num_qubits} qubits, {circuit.num_gates()} gates"
    )

    if args.optimize or config.simulation.optimize:
        optimizer = CircuitOptimizer()
        optimized = optimizer.optimize(circuit)
        print(format_optimization(optimizer.report(circuit, optimized)))
        circuit = optimized

    with Simulator(circuit.num_qubits, config=config) as sim:
        sim.run(circuit)
        probs = sim.measure_all()
        print(format_probabilities(probs, limit=args.limit))

        if args.shots is not None:
            counts = sim.sample(args.shots)
            print(format_counts(counts, args.shots))

    return 0


def cmd_optimize(args: argparse.Namespace, config: Config) -> int:
    circuit = read_circuit(args.circuit)
    optimizer = CircuitOptimizer()
    optimized = optimizer.optimize(circuit)
    print(format_optimization(optimizer.report(circuit, optimized)))

    if args.output is not None:
        write_circuit(optimized, args.output)
        logger.info(f"Optimized circuit written to {args.output}")
    return 0


def cmd_benchmark(args: argparse.Namespace, config: Config) -> int:
    n = args.qubits
    mem = estimate_memory_requirements(n)
    logger.info(f"Running benchmark with {n} qubits ({mem['state_size_mb']:.1f} MB state)")

    circuit = benchmark_circuit(n)
    hadamards = circuit.gates[:n]
    cnots = circuit.gates[n:]

    with Simulator(n, config=config) as sim:
        with PerformanceProfiler("hadamard") as h_prof:
            for gate in hadamards:
                sim.apply_gate(gate)
        with PerformanceProfiler("cnot") as c_prof:
            for gate in cnots:
                sim.apply_gate(gate)
        with PerformanceProfiler("measure") as m_prof:
            sim.measure_all()

    timings = [h_prof.metrics, c_prof.metrics, m_prof.metrics]
    total = sum(m.wall_time_seconds for m in timings)

    print(f"Benchmark results ({n} qubits, strategy={config.execution.strategy}):")
    print(f"  Hadamard gates: {h_prof.metrics.wall_time_seconds:.6f}s")
    print(f"  CNOT gates:     {c_prof.metrics.wall_time_seconds:.6f}s")
    print(f"  Measurement:    {m_prof.metrics.wall_time_seconds:.6f}s")
    print(f"  Total time:     {total:.6f}s")
    print(f"  State memory:   {mem['state_size_mb']:.2f} MB")
    return 0


def cmd_visualize(args: argparse.Namespace, config: Config) -> int:
    circuit = read_circuit(args.circuit)
    print(format_circuit(circuit, limit=args.limit))
    return 0


def cmd_version(args: argparse.Namespace, config: Config) -> int:
    print(f"QuantumMesh v{__version__}")
    return 0


COMMANDS = {
    "simulate": cmd_simulate,
    "optimize": cmd_optimize,
    "benchmark": cmd_benchmark,
    "visualize": cmd_visualize,
    "version": cmd_version,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = _load_config(getattr(args, "config", None))
    except (OSError, ValidationError, yaml.YAMLError) as e:
        setup_logger(name="quantummesh", level=args.log_level or "INFO")
        logger.error(f"Could not load configuration: {e}")
        return 1

    configure_logging(
        config,
        level=args.log_level,
        log_file=args.log_file,
        json_format=True if args.json_logs else None,
    )

    try:
        return COMMANDS[args.command](args, config)
    except (QuantumMeshError, OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
