# api/index.py
import sys
from pathlib import Path

from serverless_wsgi import handle_request

# Add the project root to Python path
BASE_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(BASE_DIR))

# Loads the WSGI app once per cold start
from appraisal_project.wsgi import application  # noqa: E402


def handler(event, context):
    # Adapt the incoming Vercel (or any serverless) request to Django
    return handle_request(application, event, context)
