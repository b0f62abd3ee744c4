import os
from dotenv import load_dotenv

load_dotenv()

# /tmp is the only writable location on most serverless hosts
SCRATCH_ROOT = '/tmp'
DEFAULT_LOG_FILE = os.path.join(SCRATCH_ROOT, 'video_coach.log')


def _env_int(name, default):
    value = os.environ.get(name)
    return int(value) if value not in (None, '') else default


def _env_bool(name, default):
    value = os.environ.get(name)
    if value in (None, ''):
        return default
    return value.lower() in ('true', '1', 'yes', 'y')


def _env_float(name, default):
    value = os.environ.get(name)
    return float(value) if value not in (None, '') else default


class Config:
    # Server
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = _env_int('PORT', 5000)
    SERVER_THREADS = _env_int('SERVER_THREADS', 6)

    # Scratch directories
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(SCRATCH_ROOT, 'uploads')
    STAGING_FOLDER = os.environ.get('STAGING_FOLDER') or os.path.join(SCRATCH_ROOT, 'myVideo')
    SCRATCH_MAX_AGE_HOURS = _env_int('SCRATCH_MAX_AGE_HOURS', 24)

    # Gemini
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash')
    VIDEO_MIME_TYPE = 'video/mp4'

    # Polling of the remote file state
    POLL_INTERVAL_SECONDS = _env_float('POLL_INTERVAL_SECONDS', 2.0)
    POLL_MAX_ATTEMPTS = _env_int('POLL_MAX_ATTEMPTS', 150)
    POLL_TIMEOUT_SECONDS = _env_float('POLL_TIMEOUT_SECONDS', 300.0)

    # Logging
    LOG_FILE = os.environ.get('LOG_FILE') or DEFAULT_LOG_FILE
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Rate limiting
    RATELIMIT_ENABLED = _env_bool('RATELIMIT_ENABLED', True)
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '60 per minute')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_STRATEGY = 'fixed-window'


class TestingConfig(Config):
    TESTING = True
    GEMINI_API_KEY = 'test-key'
    POLL_INTERVAL_SECONDS = 0
    POLL_MAX_ATTEMPTS = 5
    POLL_TIMEOUT_SECONDS = 5.0
    LOG_FILE = None
    RATELIMIT_ENABLED = False
