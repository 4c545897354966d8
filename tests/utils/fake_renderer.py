"""
Fake Renderer
=============

Stand-in for the Playwright renderer used by the tests. It speaks the same
command line and stdout protocol but never starts a browser.

Behaviour is selected with ``FAKE_RENDERER_MODE``:

``ok``           write the artifact, print the marker and an ok status line
``marker-only``  write the artifact, print only the marker
``no-marker``    exit 0 without the marker and without an artifact
``fail``         print to stderr, emit an error status line and exit 1
``status-error`` print the marker but report an error status line
``no-artifact``  report success without writing anything
``sleep``        write its pid to ``<location>/renderer.pid`` and hang until killed

When ``FAKE_RENDERER_LOG`` is set, every received argv is appended to it as
one JSON line.
"""

import argparse
import json
import os
import sys
import time
from pathlib import Path

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake carbon image"
SVG_BYTES = b'<svg xmlns="http://www.w3.org/2000/svg"></svg>'
MARKER = "The file can be found here"
PID_FILE = "renderer.pid"


def write_artifact(location: Path, image_type: str) -> Path:
    location.mkdir(parents=True, exist_ok=True)
    artifact = location / f"carbon.{image_type}"
    artifact.write_bytes(SVG_BYTES if image_type == "svg" else PNG_BYTES)
    return artifact


def status(payload: dict) -> None:
    print("CARBON_NOW_STATUS " + json.dumps(payload), flush=True)


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--url", required=True)
    parser.add_argument("--location", required=True)
    parser.add_argument("--type", default="png")
    parser.add_argument("--headless", action=argparse.BooleanOptionalAction, default=True)
    args = parser.parse_args()

    log = os.environ.get("FAKE_RENDERER_LOG")
    if log:
        with open(log, "a", encoding="utf-8") as handle:
            handle.write(json.dumps(sys.argv[1:]) + "\n")

    mode = os.environ.get("FAKE_RENDERER_MODE", "ok")
    location = Path(args.location)

    if mode == "sleep":
        pending = location / (PID_FILE + ".tmp")
        pending.write_text(str(os.getpid()), encoding="utf-8")
        os.replace(pending, location / PID_FILE)
        time.sleep(300)
        return 0

    if mode == "no-marker":
        print("Something went sideways while talking to Carbon")
        return 0

    if mode == "fail":
        print("renderer exploded: page crashed", file=sys.stderr)
        status({"status": "error", "error": "page crashed"})
        return 1

    if mode == "no-artifact":
        print(f"{MARKER}: {location / ('carbon.' + args.type)}")
        return 0

    artifact = write_artifact(location, args.type)
    print(f"{MARKER}: {artifact}")
    if mode == "ok":
        status({"status": "ok", "path": str(artifact)})
    elif mode == "status-error":
        status({"status": "error", "error": "export button missing"})
    return 0


if __name__ == "__main__":
    sys.exit(main())
