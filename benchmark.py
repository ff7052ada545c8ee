# benchmark.py
import os
import json
import time
import threading
import numpy as np
from tlb import TLBSimulator

# page-aligned, heap-like base for synthetic matrices
DEFAULT_BASE_ADDRESS = 0x7F0000000000


def _matrix_addresses(wl_cfg, order, base):
    dim = wl_cfg.get("matrix_dim", 1024)
    element_size = wl_cfg.get("element_size", 4)
    if dim < 1 or element_size < 1:
        raise ValueError("matrix_dim and element_size must be positive")
    offsets = np.arange(dim * dim, dtype=np.uint64).reshape(dim, dim)
    if order == "column_major":
        # walk j then i over a row-major laid out matrix
        offsets = offsets.T
    return np.uint64(base) + offsets.ravel() * np.uint64(element_size)


def generate_addresses(wl_cfg, page_size=4096, rng=None):
    """
    Build the ordered virtual address stream for a workload config.
    Returns a numpy uint64 array.
    """
    pattern = wl_cfg.get("pattern", "row_major")
    base = wl_cfg.get("base_address", DEFAULT_BASE_ADDRESS)

    if pattern in ("row_major", "column_major"):
        return _matrix_addresses(wl_cfg, pattern, base)
    elif pattern == "sequential":
        n = wl_cfg.get("num_accesses", 10000)
        stride = wl_cfg.get("stride", 4)
        return np.uint64(base) + np.arange(n, dtype=np.uint64) * np.uint64(stride)
    elif pattern == "random":
        if rng is None:
            rng = np.random.default_rng(wl_cfg.get("random_seed", None))
        n = wl_cfg.get("num_accesses", 10000)
        span = wl_cfg.get("span_bytes", 64 * 1024 * 1024)
        if span < 1:
            raise ValueError("span_bytes must be positive")
        offsets = rng.integers(0, span, size=n, dtype=np.uint64)
        return np.uint64(base) + offsets
    elif pattern == "cyclic":
        # thrash over num_pages distinct pages
        n = wl_cfg.get("num_accesses", 30)
        num_pages = wl_cfg.get("num_pages", 3)
        if num_pages < 1:
            raise ValueError("num_pages must be positive")
        pages = np.arange(n, dtype=np.uint64) % np.uint64(num_pages)
        return np.uint64(base) + pages * np.uint64(page_size)
    raise ValueError(f"unknown workload pattern: {pattern!r}")


def run_experiment(exp_cfg, rng=None):
    """
    Run one experiment on a fresh TLB. `exp_cfg` holds capacity, page_size
    and the workload description.
    """
    capacity = int(exp_cfg.get("capacity", 64))
    page_size = int(exp_cfg.get("page_size", 4096))
    wl_cfg = exp_cfg.get("workload", {})
    tlb = TLBSimulator(tlb_size=capacity, page_size=page_size)
    addresses = generate_addresses(wl_cfg, page_size=page_size, rng=rng)

    start = time.time()
    for addr in addresses.tolist():
        tlb.access(addr)
    end = time.time()

    return {
        "name": exp_cfg.get("name", wl_cfg.get("pattern", "row_major")),
        "capacity": capacity,
        "page_size": page_size,
        "pattern": wl_cfg.get("pattern", "row_major"),
        "stats": tlb.stats(),
        "seen_pages": tlb.get_seen_pages(),
        "duration_s": end - start,
    }


class BenchmarkRunner:
    def __init__(self, cfg):
        self.cfg = cfg
        bench_cfg = cfg.get("benchmark", {})
        self.experiments = cfg.get("experiments", [])
        self.num_threads = max(1, bench_cfg.get("num_threads", 1))
        self.seed = bench_cfg.get("random_seed", None)
        self.results_lock = threading.Lock()
        self.results = {}
        self.errors = []

    def _worker(self, indices):
        # each experiment gets its own TLB; nothing is shared but the results
        local_results = {}
        try:
            for i in indices:
                rng = np.random.default_rng(None if self.seed is None else self.seed + i)
                local_results[i] = run_experiment(self.experiments[i], rng=rng)
        except Exception as e:
            with self.results_lock:
                self.errors.append(e)
            return

        with self.results_lock:
            self.results.update(local_results)

    def run(self):
        self.results = {}
        self.errors = []
        threads = []
        indices = list(range(len(self.experiments)))
        for k in range(self.num_threads):
            chunk = indices[k::self.num_threads]
            if not chunk:
                continue
            t = threading.Thread(target=self._worker, args=(chunk,))
            t.start()
            threads.append(t)
        for t in threads:
            t.join()

        if self.errors:
            raise self.errors[0]
        return [self.results[i] for i in indices]


def summarize(results):
    rows = []
    for r in results:
        stats = r["stats"]
        rows.append({
            "name": r["name"],
            "capacity": r["capacity"],
            "page_size": r["page_size"],
            "pattern": r["pattern"],
            "stats": stats.as_dict(),
            "seen_pages": len(r["seen_pages"]),
            "duration_s": r["duration_s"],
        })
    return rows


def save_results(summary, out_cfg):
    results_dir = out_cfg.get("results_dir", "results")
    os.makedirs(results_dir, exist_ok=True)
    path = os.path.join(results_dir, out_cfg.get("results_file", "results.json"))
    with open(path, "w") as f:
        json.dump(summary, f, indent=2)
    return path
