#!/usr/bin/env python3
"""
Generate a development root CA and a sample localhost bundle.
Run this script once before starting the server.
"""

import subprocess
import sys


def run_script(script_path, *args):
    """Run a Python script and check for errors."""
    cmd = [sys.executable, script_path] + list(args)
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        print(f"ERROR: {result.stdout}{result.stderr}")
        return False
    print(result.stdout)
    return True


def main():
    print("=" * 60)
    print("Development CA Setup")
    print("=" * 60)

    # Step 1: Generate CA
    print("\n[1/2] Generating root CA certificate...")
    if not run_script("scripts/gen_ca.py", *sys.argv[1:]):
        print("Failed to generate CA certificate")
        return 1

    # Step 2: Issue a localhost bundle
    print("\n[2/2] Issuing localhost certificate...")
    if not run_script("scripts/gen_cert.py", "localhost", "localhost", "127.0.0.1", "::1"):
        print("Failed to issue localhost certificate")
        return 1

    print("\n" + "=" * 60)
    print("✓ Setup complete!")
    print("=" * 60)
    print("\nFiles created:")
    print("  - ca.crt / ca.key (signing CA, paths from CA_CERT / CA_KEY)")
    print("  - localhost.zip (cert.crt, cert.key, ca.crt)")
    print("\nYou can now run the server: python -m devca.server")
    return 0


if __name__ == "__main__":
    sys.exit(main())
