"""Command line entry point: validate a CORS policy file and describe it."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import List, Optional

from . import config
from .evaluator import CORSFeatures
from .loader import load_policy
from .logging import configure_logging
from .policy import PolicyConfigurationError


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="corsgate",
        description="Validate a YAML file of origins and methods and print the resulting CORS policy.",
    )
    ap.add_argument(
        "-f",
        "--cors-file",
        default=config.policy_file(),
        help="YAML file of origins and methods (default: $CORS_POLICY_FILE)",
    )
    ap.add_argument(
        "--check-headers",
        action="store_true",
        default=config.check_headers_enabled(),
        help="Also check Access-Control-Request-Headers against the policy",
    )
    ap.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    configure_logging(args.log_level)

    if not args.cors_file:
        ap.error("--cors-file is required when CORS_POLICY_FILE is not set")

    try:
        policy = load_policy(args.cors_file)
    except PolicyConfigurationError as exc:
        print(f"corsgate: {exc}", file=sys.stderr)
        return 2

    features = CORSFeatures(
        check_headers=args.check_headers,
        deny_keeps_origin=config.deny_keeps_origin(),
    )
    print(json.dumps({"origins": policy.as_dict(), "features": asdict(features)}, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
