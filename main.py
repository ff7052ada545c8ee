# main.py
import argparse
import json
import os
from benchmark import BenchmarkRunner, summarize, save_results
from tlb import format_stats
from visualize import plot_miss_breakdown, plot_seen_pages


def load_config(path="config.json"):
    with open(path, "r") as f:
        return json.load(f)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="LRU TLB simulator")
    parser.add_argument("--config", default="config.json", help="Experiment configuration (JSON)")
    parser.add_argument("--no-plots", action="store_true", help="Skip writing plots")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    cfg = load_config(args.config)
    runner = BenchmarkRunner(cfg)
    results = runner.run()
    for r in results:
        print(f"\nExperiment {r['name']}: {r['pattern']}, TLB with {r['capacity']} entries, "
              f"{r['page_size']} byte pages")
        print(format_stats(r["stats"]))

    out_cfg = cfg.get("output", {})
    summary = summarize(results)
    results_path = save_results(summary, out_cfg)
    print("\nResults saved to:", results_path)

    if not args.no_plots:
        results_dir = out_cfg.get("results_dir", "results")
        breakdown_path = out_cfg.get("breakdown_plot", os.path.join(results_dir, "miss_breakdown.png"))
        seen_path = out_cfg.get("seen_pages_plot", os.path.join(results_dir, "seen_pages.png"))
        plot_miss_breakdown(summary, breakdown_path)
        plot_seen_pages(summary, seen_path)
        print("Plots saved to:", breakdown_path, seen_path)
    return summary


if __name__ == "__main__":
    main()
