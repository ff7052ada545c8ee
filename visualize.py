# visualize.py
import os
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


def _ensure_dir(outpath):
    d = os.path.dirname(outpath)
    if d:
        os.makedirs(d, exist_ok=True)


def plot_miss_breakdown(summary, outpath):
    _ensure_dir(outpath)
    names = [row["name"] for row in summary]
    hits = [row["stats"]["hits"] for row in summary]
    cold = [row["stats"]["cold_misses"] for row in summary]
    capacity = [row["stats"]["capacity_misses"] for row in summary]
    x = range(len(names))

    plt.figure(figsize=(8, 4))
    plt.bar(x, hits, label="Hits")
    plt.bar(x, cold, bottom=hits, label="Cold Misses")
    plt.bar(x, capacity, bottom=[h + c for h, c in zip(hits, cold)], label="Capacity Misses")
    for i, row in enumerate(summary):
        plt.annotate(f"{row['stats']['hit_rate']:.2f}%", (i, row["stats"]["accesses"]),
                     ha="center", va="bottom")
    plt.xticks(list(x), names, rotation=15)
    plt.ylabel("Accesses")
    plt.title("TLB Hits and Misses per Experiment")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()


def plot_seen_pages(summary, outpath):
    _ensure_dir(outpath)
    names = [row["name"] for row in summary]
    pages = [row["seen_pages"] for row in summary]
    plt.figure(figsize=(6, 4))
    plt.bar(names, pages)
    plt.ylabel("Distinct pages")
    plt.title("Pages Touched per Experiment")
    plt.grid(True, axis="y")
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
