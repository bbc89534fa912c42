#!/usr/bin/env python3
"""
Generate auto-login links for BE/BM users.
The encoded value goes into the ``data`` parameter of the portal's /auth page.
"""

import argparse

from camp_portal.identity import encode_login_link


def build_link(base_url, imacx_id):
    return f"{base_url.rstrip('/')}/auth?data={encode_login_link(imacx_id)}"


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("imacx_ids", nargs="+", help="IMACX IDs to encode")
    parser.add_argument("--base-url", default="http://localhost:8080",
                        help="Portal address the links point at")
    args = parser.parse_args()

    print("=" * 70)
    print("Vitamin D Camp Login Link Generator")
    print("=" * 70)
    print()

    for i, imacx_id in enumerate(args.imacx_ids, 1):
        print(f"  {i}. {imacx_id}")
        print(f"     {build_link(args.base_url, imacx_id)}")
    print()

    print("=" * 70)
    print("Note: links log the user in directly. Share them only with the owner.")
    print("=" * 70)
