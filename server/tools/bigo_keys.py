"""Development helpers for the recharge provider's RSA keys.

Not imported by the runtime package. Usage::

    python -m server.tools.bigo_keys generate --out keys
    python -m server.tools.bigo_keys to-base64 keys/bigo-private-key.pem
"""
from __future__ import annotations
import argparse
import base64
import os
from typing import Dict, List, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


PRIVATE_KEY_FILE = "bigo-private-key.pem"
PUBLIC_KEY_FILE = "bigo-public-key.pem"


def generate_rsa_key_pair(key_size: int = 2048) -> Dict[str, str]:
    """Return a fresh ``{"privateKey": PKCS#8 PEM, "publicKey": SPKI PEM}`` pair."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return {"privateKey": private_pem.decode("ascii"), "publicKey": public_pem.decode("ascii")}


def to_base64(pem: str) -> str:
    return base64.b64encode(pem.encode("utf-8")).decode("ascii")


def write_key_pair(out_dir: str, pair: Dict[str, str]) -> Dict[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    paths = {
        "privateKey": os.path.join(out_dir, PRIVATE_KEY_FILE),
        "publicKey": os.path.join(out_dir, PUBLIC_KEY_FILE),
    }
    for name, path in paths.items():
        with open(path, "w", encoding="utf-8") as f:
            f.write(pair[name])
    os.chmod(paths["privateKey"], 0o600)
    return paths


def run(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="bigo_keys")
    sub = parser.add_subparsers(dest="command", required=True)
    gen = sub.add_parser("generate", help="generate an RSA-2048 key pair")
    gen.add_argument("--out", default="keys")
    b64 = sub.add_parser("to-base64", help="print a PEM file as a single-line env value")
    b64.add_argument("pem_file")
    args = parser.parse_args(argv)

    if args.command == "generate":
        paths = write_key_pair(args.out, generate_rsa_key_pair())
        print(f"Private key saved to: {paths['privateKey']}")
        print(f"Public key saved to: {paths['publicKey']}")
        print("Send the public key to Bigo; set BIGO_PRIVATE_KEY from the private key.")
        return 0
    with open(args.pem_file, "r", encoding="utf-8") as f:
        pem = f.read()
    print("BIGO_PRIVATE_KEY=" + to_base64(pem))
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
