"""Generate an HS256 JWT accepted by the conviction engine API (no external deps).

Usage:
  export CE_JWT_SECRET="your-secret"
  python scripts/generate_jwt.py --sub 6f1c...-uuid --role MEMBER

`sub` must be the caller's user id; the API acts on behalf of that user.
"""

from __future__ import annotations

import argparse
import base64
import hashlib
import hmac
import json
import os
import time
import uuid


def b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def make_jwt(*, sub: str, role: str, secret: str, exp_seconds: int) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    payload = {"sub": sub, "role": role, "exp": int(time.time()) + exp_seconds}

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--sub", required=True, type=uuid.UUID, help="user id the token acts as")
    ap.add_argument("--role", default="MEMBER", choices=["MEMBER", "ADMIN"])
    ap.add_argument("--exp-seconds", type=int, default=60 * 60 * 24)
    args = ap.parse_args()

    secret = os.environ.get("CE_JWT_SECRET")
    if not secret:
        raise SystemExit("Missing CE_JWT_SECRET in environment.")

    print(make_jwt(sub=str(args.sub), role=args.role, secret=secret, exp_seconds=args.exp_seconds))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
