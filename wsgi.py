import os

# Production unless the platform says otherwise
os.environ.setdefault("ENV", "production")

from cashglitch import create_app  # noqa: E402

app = create_app()
