#!/usr/bin/env python
"""
Test runner

Runs pytest from the project root with the current interpreter; extra
arguments replace the default test path.
"""
import os
import sys
import subprocess


def main() -> int:
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    os.chdir(project_root)

    cmd = [sys.executable, "-m", "pytest", "tests/", "-v", "--tb=short"]
    if len(sys.argv) > 1:
        cmd = [sys.executable, "-m", "pytest"] + sys.argv[1:]

    print(f"Project: {project_root}")
    print(f"Running: {' '.join(cmd)}")
    return subprocess.run(cmd).returncode


if __name__ == "__main__":
    sys.exit(main())
