"""Global pytest configuration."""

import os
import tempfile

# Keep tests away from real credentials and the user's config blob
os.environ["GEMINI_API_KEY"] = ""
os.environ["FIREBASE_API_KEY"] = ""
os.environ["FIREBASE_PROJECT_ID"] = ""
os.environ.setdefault("CONFIG_PATH", os.path.join(tempfile.mkdtemp(prefix="shn_canvas_"), "config.json"))
