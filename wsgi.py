# ==============================================================================
# WSGI Entry Point - For Gunicorn in production
# ==============================================================================
# Entry point for WSGI servers such as Gunicorn.
#
# USAGE:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# PROJECT LAYOUT:
#   repo_root/           <- Working directory (on sys.path automatically)
#   ├── wsgi.py          <- This file
#   ├── pyproject.toml
#   └── it_marine/       <- Python package
#       ├── main.py
#       ├── services/
#       └── repositories/
# ==============================================================================

from it_marine import config
from it_marine.main import create_app

app = create_app()

# ==============================================================================
# ENTRY POINT
# ==============================================================================
# 'app' is exported for Gunicorn:
#   gunicorn wsgi:app
#
# Local development:
#   python wsgi.py
# ==============================================================================

if __name__ == '__main__':
    app.run(debug=config.FLASK_DEBUG, host=config.FLASK_HOST, port=config.FLASK_PORT)
