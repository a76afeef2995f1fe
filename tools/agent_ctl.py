#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from agentcheck.client import query_report, send_state


def main() -> int:
    p = argparse.ArgumentParser(description="Query or change an agent-check sidecar")
    p.add_argument("--host", default="localhost")
    p.add_argument("--port", type=int, required=True)
    p.add_argument("--set", dest="state", default=None,
                   help="State to push on the control channel; omit to read the report channel")
    p.add_argument("--timeout", type=float, default=5.0)
    args = p.parse_args()

    try:
        if args.state is None:
            reply = query_report(args.host, args.port, timeout=args.timeout)
        else:
            reply = send_state(args.host, args.port, args.state, timeout=args.timeout)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(reply.strip())
    return 0 if reply.strip() != "NOT SET" else 2


if __name__ == "__main__":
    raise SystemExit(main())
