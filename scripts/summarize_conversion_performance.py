#!/usr/bin/env python3

import profconv.performance
import argparse


def main():
    parser  = argparse.ArgumentParser(description="Summarize conversion performance logs from a CSV file")
    parser.add_argument("input", help="Path to the performance log CSV file")
    parser.add_argument("--top", type=int, default=10, help="Number of slowest scenarios to show per phase")

    args = parser.parse_args()

    performance = profconv.performance.load_performance(args.input)
    summaries = profconv.performance.summarize_performance(performance, top=args.top)

    if not summaries:
        print(f"No events in {args.input}")
        return

    print(f"{'phase':<12} {'count':>6} {'total':>10} {'mean':>9} {'p50':>9} {'p95':>9} {'max':>9}")
    for s in summaries:
        print(f"{s.name:<12} {s.count:>6} {s.total_ms:>10.2f} {s.mean_ms:>9.2f} {s.p50_ms:>9.2f} {s.p95_ms:>9.2f} {s.max_ms:>9.2f}")

    for s in summaries:
        print("")
        print(f"Phase: {s.name}")
        for scenario_name, duration in s.slowest:
            print(f"    {duration:.2f} ms - {scenario_name}")


if __name__ == "__main__":
    main()
