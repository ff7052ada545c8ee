import json

import numpy as np
import pytest

from benchmark import (
    DEFAULT_BASE_ADDRESS,
    BenchmarkRunner,
    generate_addresses,
    run_experiment,
    save_results,
    summarize,
)


def test_row_major_addresses_are_contiguous():
    addrs = generate_addresses({"pattern": "row_major", "matrix_dim": 4, "element_size": 4})
    assert addrs.dtype == np.uint64
    assert addrs.tolist() == [DEFAULT_BASE_ADDRESS + 4 * k for k in range(16)]


def test_column_major_walks_columns():
    addrs = generate_addresses({"pattern": "column_major", "matrix_dim": 3,
                                "element_size": 8, "base_address": 0})
    assert addrs.tolist() == [0, 24, 48, 8, 32, 56, 16, 40, 64]


def test_sequential_stride():
    addrs = generate_addresses({"pattern": "sequential", "num_accesses": 4,
                                "stride": 100, "base_address": 1000})
    assert addrs.tolist() == [1000, 1100, 1200, 1300]


def test_random_is_seeded_and_bounded():
    cfg = {"pattern": "random", "num_accesses": 500, "span_bytes": 8192, "base_address": 0}
    a = generate_addresses(cfg, rng=np.random.default_rng(3))
    b = generate_addresses(cfg, rng=np.random.default_rng(3))
    assert a.tolist() == b.tolist()
    assert a.max() < 8192


def test_cyclic_pages():
    addrs = generate_addresses({"pattern": "cyclic", "num_pages": 3, "num_accesses": 7,
                                "base_address": 0}, page_size=4096)
    assert (addrs // 4096).tolist() == [0, 1, 2, 0, 1, 2, 0]


def test_unknown_pattern():
    with pytest.raises(ValueError):
        generate_addresses({"pattern": "zigzag"})


def test_row_major_matrix_has_only_cold_misses():
    r = run_experiment({"capacity": 64, "page_size": 4096,
                        "workload": {"pattern": "row_major", "matrix_dim": 1024}})
    s = r["stats"]
    assert s.accesses == 1024 * 1024
    assert s.cold_misses == 1024
    assert s.capacity_misses == 0
    assert len(r["seen_pages"]) == 1024


def test_column_major_matrix_is_capacity_bound():
    r = run_experiment({"capacity": 64, "page_size": 4096,
                        "workload": {"pattern": "column_major", "matrix_dim": 512}})
    s = r["stats"]
    # two 2048-byte rows per page, 256 pages per column pass
    assert s.cold_misses == 256
    assert s.capacity_misses == 512 * 256 - 256
    assert s.hits == 512 * 256
    assert len(r["seen_pages"]) == 256


def test_thrashing_experiment():
    r = run_experiment({"name": "thrash", "capacity": 2, "page_size": 4096,
                        "workload": {"pattern": "cyclic", "num_pages": 3, "num_accesses": 30}})
    assert r["name"] == "thrash"
    s = r["stats"]
    assert (s.hits, s.cold_misses, s.capacity_misses) == (0, 3, 27)


def test_invalid_capacity_propagates():
    with pytest.raises(ValueError):
        run_experiment({"capacity": 0, "page_size": 4096, "workload": {"pattern": "cyclic"}})


def _cfg(num_threads):
    return {
        "benchmark": {"num_threads": num_threads, "random_seed": 1},
        "experiments": [
            {"name": "a", "capacity": 2, "page_size": 4096,
             "workload": {"pattern": "cyclic", "num_pages": 3, "num_accesses": 30}},
            {"name": "b", "capacity": 64, "page_size": 4096,
             "workload": {"pattern": "row_major", "matrix_dim": 64}},
            {"name": "c", "capacity": 8, "page_size": 4096,
             "workload": {"pattern": "random", "num_accesses": 1000, "span_bytes": 65536}},
        ],
    }


def test_runner_preserves_order_and_is_deterministic():
    single = BenchmarkRunner(_cfg(1)).run()
    multi = BenchmarkRunner(_cfg(3)).run()
    assert [r["name"] for r in multi] == ["a", "b", "c"]
    assert [r["stats"] for r in single] == [r["stats"] for r in multi]


def test_runner_reraises_worker_errors():
    cfg = _cfg(2)
    cfg["experiments"][1]["page_size"] = 0
    with pytest.raises(ValueError):
        BenchmarkRunner(cfg).run()


def test_summary_saved_as_json(tmp_path):
    summary = summarize(BenchmarkRunner(_cfg(1)).run())
    path = save_results(summary, {"results_dir": str(tmp_path / "out"),
                                  "results_file": "r.json"})
    with open(path) as f:
        loaded = json.load(f)
    assert loaded == summary
    assert loaded[0]["stats"]["capacity_misses"] == 27
    assert loaded[1]["seen_pages"] == 4


def test_matrix_honours_base_address():
    addrs = generate_addresses({"pattern": "column_major", "matrix_dim": 2,
                                "element_size": 4, "base_address": 8192})
    assert addrs.tolist() == [8192, 8200, 8196, 8204]


def test_summary_reports_hit_rate_once():
    summary = summarize(BenchmarkRunner(_cfg(1)).run())
    row = summary[0]
    assert "hit_rate" not in row
    assert row["stats"]["hit_rate"] == 0.0
