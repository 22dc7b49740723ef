#!/usr/bin/env python3
from __future__ import annotations

"""
CashGlitch launcher: local dev server.

- Local dev:             ./run.py --env development
- No reloader:           ./run.py --env development --no-reload
- Gunicorn export:       gunicorn "wsgi:app"
"""

import argparse
import logging
import os
from typing import Optional, Sequence

from dotenv import load_dotenv

ENV_CHOICES = ("development", "production", "testing")


def _default_env() -> str:
    # Same lookup as the app factory: APP_ENV, ENV, NODE_ENV, FLASK_ENV
    from cashglitch import env_mode

    mode = env_mode()
    return mode if mode in ENV_CHOICES else "development"


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run the CashGlitch dev server")
    p.add_argument("--env", choices=ENV_CHOICES, default=_default_env())
    p.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "5000")))
    p.add_argument("--no-reload", action="store_true", help="disable the Werkzeug reloader")
    p.add_argument("--seed", action="store_true", help="create tables + seed defaults before serving")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    # IMPORTANT: never override real env vars
    load_dotenv(override=False)
    args = _parse_args(argv)
    os.environ["ENV"] = args.env

    from cashglitch import create_app
    from cashglitch.config import CONFIG_BY_NAME
    from cashglitch.services.content import initialize_and_seed

    app = create_app(CONFIG_BY_NAME[args.env])
    log = logging.getLogger("cashglitch.run")

    if args.env == "production":
        log.warning("run.py is a dev server; serve production through gunicorn wsgi:app")

    if args.seed:
        with app.app_context():
            inserted = initialize_and_seed()
        log.info("Seeded defaults: %s", inserted)

    app.run(
        host=args.host,
        port=args.port,
        debug=app.debug,
        use_reloader=app.debug and not args.no_reload,
    )


if __name__ == "__main__":
    main()
