"""
Integration tests for reproducibility.

Same circuit file, config and seed must give identical distributions and
identical sampled counts.
"""

import numpy as np

from quantummesh.circuits import optimize, random_circuit
from quantummesh.config import Config
from quantummesh.io.formats import read_circuit, write_circuit
from quantummesh.sim import Simulator, simulate


def test_file_round_trip_preserves_distribution(tmp_path):
    circuit = random_circuit(5, 10, seed=42)
    path = tmp_path / "random.json"
    write_circuit(circuit, path)

    np.testing.assert_array_equal(simulate(read_circuit(path)), simulate(circuit))


def test_seeded_sampling_repeatable():
    circuit = random_circuit(4, 8, seed=1)
    config = Config(simulation={"seed": 123})

    counts = []
    for _ in range(2):
        with Simulator(4, config=config) as sim:
            sim.run(circuit)
            counts.append(sim.sample(1000))

    assert counts[0] == counts[1]
    assert sum(counts[0].values()) == 1000


def test_optimizer_preserves_probabilities():
    """Cancelled pairs are identities, so the distribution is unchanged."""
    circuit = random_circuit(4, 12, seed=5)
    circuit = circuit.with_gates(
        tuple(g for gate in circuit.gates for g in (gate, gate))
    )
    optimized = optimize(circuit)

    assert optimized.num_gates() < circuit.num_gates()
    np.testing.assert_allclose(simulate(optimized), simulate(circuit), atol=1e-10)


def test_config_yaml_drives_simulation(tmp_path):
    config = Config(
        execution={"strategy": "threads", "unit_size": 4, "max_workers": 2},
        simulation={"optimize": True, "seed": 9},
    )
    path = tmp_path / "config.yaml"
    config.to_yaml(path)

    circuit = random_circuit(3, 6, seed=11)
    np.testing.assert_allclose(
        simulate(circuit, config=Config.from_yaml(path)),
        simulate(circuit),
        atol=1e-12,
    )
