#!/usr/bin/env python3
"""
Test runner script for lazy_ndtree tests.

Wraps pytest with a few common configurations.
"""

import sys
import subprocess
from pathlib import Path


def run_command(cmd, cwd):
    """Run a command and return whether it succeeded."""
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)
    print(result.stdout)
    if result.stderr:
        print("STDERR:", result.stderr)
    return result.returncode == 0


def main():
    project_root = Path(__file__).parent
    pytest_cmd = [sys.executable, "-m", "pytest"]

    if len(sys.argv) > 1:
        if sys.argv[1] == "--help" or sys.argv[1] == "-h":
            print("Usage: python run_tests.py [option]")
            print("\nOptions:")
            print("  --help, -h        Show this help message")
            print("  --verbose, -v     Run tests with verbose output")
            print("  --coverage        Run tests with coverage report")
            print("  --fast            Stop at the first failure, short tracebacks")
            print("  --class <name>    Run one test class from test_segment_tree.py")
            print("  --method <name>   Run tests whose name matches")
            print("\nExamples:")
            print("  python run_tests.py --coverage")
            print("  python run_tests.py --class TestSegmentTreeUpdates")
            print("  python run_tests.py --method round_trip")
            return

        elif sys.argv[1] == "--verbose" or sys.argv[1] == "-v":
            cmd = pytest_cmd + ["tests/", "-v"]

        elif sys.argv[1] == "--coverage":
            cmd = pytest_cmd + ["tests/", "--cov=lazy_ndtree", "--cov-report=term-missing"]

        elif sys.argv[1] == "--fast":
            cmd = pytest_cmd + ["tests/", "-x", "--tb=short"]

        elif sys.argv[1] == "--class" and len(sys.argv) > 2:
            cmd = pytest_cmd + [f"tests/test_segment_tree.py::{sys.argv[2]}", "-v"]

        elif sys.argv[1] == "--method" and len(sys.argv) > 2:
            cmd = pytest_cmd + ["tests/", "-k", sys.argv[2], "-v"]

        else:
            print(f"Unknown option: {sys.argv[1]}")
            print("Use --help for available options")
            return
    else:
        cmd = pytest_cmd + ["tests/", "--tb=short"]

    if run_command(cmd, project_root):
        print("\nAll tests passed.")
    else:
        print("\nSome tests failed.")
        sys.exit(1)


if __name__ == "__main__":
    main()
