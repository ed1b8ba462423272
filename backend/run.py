"""Development server for the genenav Flask API."""

import os
import sys

# Add parent directory to path so we can import backend
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv

if __name__ == "__main__":
    # Load environment variables before settings are read
    load_dotenv()

    from backend.app import flask_app

    if not os.environ.get("GENENAV_EVO2_URL"):
        print("Warning: GENENAV_EVO2_URL is not set, variant analysis is disabled")
        print("Set it in .env file or export it in your shell")

    print("Starting genenav API server...")
    print("API available at: http://localhost:5000")
    print("Health check: http://localhost:5000/api/health")
    print("Press Ctrl+C to stop")

    flask_app.run(
        host="0.0.0.0",
        port=5000,
        debug=True,
    )
