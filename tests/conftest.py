from __future__ import annotations

import os

# Set env before any family_trips imports (settings are created at import time).
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["DOCUMENT_AI_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""
