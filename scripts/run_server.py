import argparse
import sys
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


REPO_ROOT = _repo_root()
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import uvicorn

from api.engine.runtime_settings_v1 import configure_logging, load_runtime_settings


def main() -> int:
    settings = load_runtime_settings()

    ap = argparse.ArgumentParser(description="Serve the shape-matching wall server")
    ap.add_argument("--host", default=settings.host, help="Bind address")
    ap.add_argument("--port", type=int, default=settings.port, help="Bind port")
    ap.add_argument("--log-level", default=settings.log_level, help="Python logging level")
    args = ap.parse_args()

    configure_logging(args.log_level)

    from api.main import app

    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
