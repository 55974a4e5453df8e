#!/usr/bin/env python3
"""
Issue a certificate bundle signed by the local CA.
Usage: python gen_cert.py <common_name> [name-or-ip ...]
Arguments that parse as IP addresses become IP SANs, the rest DNS SANs.
Produces <common_name>.zip holding cert.crt, cert.key and ca.crt.
"""
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import ipaddress
from dotenv import load_dotenv

from devca.common.errors import CAError
from devca.storage.bundle import write_bundle
from devca.storage.ca_store import load_ca


def split_names(values):
    """Return (dns_names, ip_addresses) preserving argument order."""
    dns_names, ips = [], []
    for value in values:
        try:
            ipaddress.ip_address(value)
        except ValueError:
            dns_names.append(value)
        else:
            ips.append(value)
    return dns_names, ips


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 1:
        print("Usage: gen_cert.py <common_name> [name-or-ip ...]")
        return 1

    load_dotenv()
    cn = argv[0]
    dns_names, ips = split_names(argv[1:])

    try:
        cert = load_ca().issue(cn, dns_names, ips)
        out_path = f"{cn or 'cert'}.zip"
        with open(out_path, "wb") as f:
            write_bundle(cert, f)
    except (OSError, CAError) as e:
        print(f"❌ {e}")
        return 1

    print(f"Wrote {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
