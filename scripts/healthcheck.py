#!/usr/bin/env python
"""Container healthcheck: exits 0 only when /healthz reports the database and bridge as ok."""

import json
import os
import sys
from urllib import request, error


def main() -> int:
    host = os.getenv("HEALTHCHECK_HOST", "127.0.0.1")
    port = os.getenv("PORT", "5000")
    target = f"http://{host}:{port}/healthz"
    try:
        with request.urlopen(target, timeout=5) as resp:
            if resp.status != 200:
                return 1
            body = json.loads(resp.read().decode("utf-8") or "{}")
    except (error.URLError, ValueError):
        return 1
    return 0 if body.get("status") == "ok" else 1


if __name__ == "__main__":
    sys.exit(main())
