"""
Script to run sample analytics against the Scoresight REST API.
Make sure the server is running before executing this script.

Usage:
    python query_sample_scores.py [--seed N]
"""

import argparse
import json
import os
import sys

import requests

from scoresight.core.entities import to_dict
from scoresight.demo_data import build_demo_dataset


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"
_WARN_CHAR = "⚠" if _console_supports_utf8() else "[WARN]"


def _detect_base_url() -> str:
    """Determine a reachable BASE_URL.

    Priority: environment variable `SCORESIGHT_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:8000.
    """
    env = os.environ.get("SCORESIGHT_BASE_URL")
    if env:
        return env

    candidates = [
        "http://127.0.0.1:8000",
        "http://127.0.0.1:8888",
        "http://localhost:8000",
    ]

    for c in candidates:
        try:
            resp = requests.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


BASE_URL = _detect_base_url()


def check_server():
    """Check if the server is running."""
    try:
        response = requests.get(f"{BASE_URL}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running")
            return True
    except requests.exceptions.RequestException:
        pass
    print(f"{_FAIL_CHAR} Server is not running!")
    print("\nPlease start the server first:")
    print("  python -m scoresight.main --serve --port 8000")
    return False


def post(path, payload):
    """POST a payload and return the decoded response, or None on failure."""
    try:
        response = requests.post(f"{BASE_URL}{path}", json=payload, timeout=10)
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error calling {path}: {e}")
        return None
    if response.status_code != 200:
        print(f"{_FAIL_CHAR} {path} failed ({response.status_code}): {response.text}")
        return None
    return response.json()


def cohort_payload(dataset):
    return {
        "students": [to_dict(student) for student in dataset.students],
        "subjects": [to_dict(subject) for subject in dataset.program.subjects],
    }


def show_dashboard(payload):
    summary = post("/dashboard/summary", payload)
    if summary is None:
        return
    print(f"\n{'='*60}")
    print("Dashboard Summary")
    print(f"{'='*60}")
    print(json.dumps(summary["statistics"], indent=2))
    for student in summary["top_students"]:
        print(f"  #{student['rank']:<3} {student['student_name']:22} {student['percentage']:6.1f}%")
    print(f"{_WARN_CHAR} Needing attention: {summary['needing_attention']}")


def show_gaps(payload):
    gaps = post("/gaps", payload)
    if gaps is None:
        return
    print(f"\n{'='*60}")
    print("Weakest Sub-topics")
    print(f"{'='*60}")
    for gap in gaps[:8]:
        print(f"  {gap['priority']:9} | {gap['subject_code']} {gap['name']:25} | {gap['average_percentage']:5.1f}%")


def show_rank(payload, student_id):
    result = post("/ranking/rank", dict(payload, student_id=student_id))
    if result is None:
        return
    print(f"\n{_OK_CHAR} {student_id}: rank {result['rank']} of {result['cohort_size']}, "
          f"percentile {result['percentile']:.1f}")


def main():
    """Main execution."""
    parser = argparse.ArgumentParser(description="Query the Scoresight REST API with demo data")
    parser.add_argument("--seed", type=int, default=42, help="Seed for demo data")
    args = parser.parse_args()

    print("="*60)
    print("Scoresight - Sample Analytics Script")
    print("="*60)
    print()

    if not check_server():
        sys.exit(1)

    dataset = build_demo_dataset(seed=args.seed)
    payload = cohort_payload(dataset)

    show_dashboard(payload)
    show_gaps(payload)
    if dataset.students:
        show_rank(payload, dataset.students[0].id)

    print("\nYou can now:")
    print(f"  - View API docs: {BASE_URL}/docs")
    print(f"  - Check health: curl {BASE_URL}/health")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{_FAIL_CHAR} Interrupted by user")
        sys.exit(1)
