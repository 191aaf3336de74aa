"""Entry point for the Sheet Plotter Flask application."""

from __future__ import annotations

import logging
import os

from sheet_plotter import create_app

app = create_app()


def _is_production() -> bool:
    """Return ``True`` when the app should run in production mode."""

    return os.environ.get("FLASK_ENV", "production") == "production"


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    port = int(os.environ.get("PORT", 5000))
    debug = not _is_production()
    app.run(host="0.0.0.0", port=port, debug=debug, use_reloader=debug)
