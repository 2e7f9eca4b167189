"""Run the tracker with Flask's server: `python app.py` (APP_ENV selects settings)."""

import os

from src.edu_tracker.edu_tracker.main import create_app

app = create_app()

if __name__ == "__main__":
    # The reloader would start a second event loop and a second poller.
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        threaded=True,
        use_reloader=False,
    )
