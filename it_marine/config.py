# ==============================================================================
# CONFIGURATION - Environment variables and defaults
# ==============================================================================
# Every setting has a working default for local use on the office machine.
#
#   IT_MARINE_DATA_DIR    Folder holding it_marine_app_data.json (default: ./data)
#   IT_MARINE_LOGS_DIR    Folder for profiling logs (default: ./logs)
#   IT_MARINE_SECRET_KEY  Flask session secret (flash messages)
#   GEMINI_API_KEY        Credential for the AI summary (falls back to API_KEY)
#   GEMINI_MODEL          Model used for the AI summary
#   ENABLE_PROFILING      '0' disables route/function profiling
#   FLASK_HOST / FLASK_PORT / FLASK_DEBUG   Development server
# ==============================================================================

import os

BASE = os.path.dirname(os.path.abspath(__file__))

DATA_DIR = os.environ.get('IT_MARINE_DATA_DIR', os.path.join(os.getcwd(), 'data'))
LOGS_DIR = os.environ.get('IT_MARINE_LOGS_DIR', os.path.join(os.getcwd(), 'logs'))

_DEFAULT_SECRET = 'it_marine_dev_secret_key_change_me'
SECRET_KEY = os.environ.get('IT_MARINE_SECRET_KEY') or _DEFAULT_SECRET

GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY') or os.environ.get('API_KEY')
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-3-flash-preview')
GEMINI_ENDPOINT = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'
AI_TIMEOUT_SECONDS = 30.0

ENABLE_PROFILING = os.environ.get('ENABLE_PROFILING', '1') != '0'

# Uploads: JPEG attachments are stored inline as data URIs
MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5 MB

FLASK_HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
FLASK_PORT = int(os.environ.get('FLASK_PORT', 5000))
FLASK_DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
