"""Development entry point for running the posboard service."""

import os
import sys
from posboard.app import create_app
from dotenv import load_dotenv

if getattr(sys, "frozen", False):
    load_dotenv(os.path.join(sys._MEIPASS, ".env"))
else:
    load_dotenv()

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.getenv("POSBOARD_HOST", "127.0.0.1"),
        port=int(os.getenv("POSBOARD_PORT", "5000")),
    )
