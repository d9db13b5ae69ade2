"""
polyplan — entry point.

Usage:
    python -m polyplan serve                      # start web server on :8000
    python -m polyplan serve --port 3000
    python -m polyplan plan request.json          # print the result as JSON
    python -m polyplan plan request.json --out result.json
"""

import json
import logging
import sys
from pathlib import Path

USAGE = (
    "Usage: python -m polyplan serve [--port PORT] [--host HOST]\n"
    "       python -m polyplan plan REQUEST.json [--out RESULT.json]"
)


def _plan(args: list[str]) -> int:
    from polyplan.pipeline.land import PlanningInputError, parse_plan_request
    from polyplan.pipeline.placer import planning_result_to_dict
    from polyplan.pipeline.planning import plan_layout

    paths = [a for i, a in enumerate(args) if not a.startswith("--")
             and (i == 0 or args[i - 1] != "--out")]
    out = None
    for i, a in enumerate(args):
        if a == "--out" and i + 1 < len(args):
            out = Path(args[i + 1])
    if not paths:
        print(USAGE)
        return 1

    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    data = json.loads(Path(paths[0]).read_text(encoding="utf-8"))
    try:
        request = parse_plan_request(data)
        result = plan_layout(request.land, request.config, request.exclusions)
    except PlanningInputError as exc:
        for err in exc.errors:
            print(f"error: {err}", file=sys.stderr)
        return 2

    text = json.dumps(planning_result_to_dict(result), indent=2)
    if out is not None:
        out.write_text(text, encoding="utf-8")
        print(f"{len(result.structures)} structure(s), "
              f"{result.coverage:.1%} coverage → {out}")
    else:
        print(text)
    for w in result.warnings:
        print(f"warning: {w}", file=sys.stderr)
    return 0


def main():
    args = sys.argv[1:]
    cmd = args[0] if args else "serve"

    if cmd == "serve":
        port = 8000
        host = "127.0.0.1"
        for i, a in enumerate(args):
            if a == "--port" and i + 1 < len(args):
                port = int(args[i + 1])
            elif a == "--host" and i + 1 < len(args):
                host = args[i + 1]

        from polyplan.web.server import main as serve
        serve(host=host, port=port)
    elif cmd == "plan":
        sys.exit(_plan(args[1:]))
    else:
        print(f"Unknown command: {cmd}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
