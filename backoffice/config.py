import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()

class Config:
    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///backoffice.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Debug Configuration
    DEBUG = os.getenv('FLASK_ENV') == 'development'

    # Admin credentials (single back-office account)
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', 'admin@example.com')
    ADMIN_PASSWORD_HASH = os.getenv('ADMIN_PASSWORD_HASH')
    # Plain password is hashed at startup when no hash is configured
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')
    INVALID_CREDENTIALS_MESSAGE = 'არასწორი ელფოსტა ან პაროლი'
    REMEMBER_EMAIL_COOKIE = 'remembered_email'

    # Object storage Configuration
    STORAGE_URL = os.getenv('STORAGE_URL', 'http://localhost:54321')
    STORAGE_API_KEY = os.getenv('STORAGE_API_KEY')
    STORAGE_TIMEOUT = int(os.getenv('STORAGE_TIMEOUT', '30'))
    STORAGE_BUCKETS = {
        'blog-images': '',
        'course-images': '',
        'lecturers': '',
        'public': 'offers/',
        'avatars': 'avatars/',
    }
    INLINE_UPLOAD_MAX_BYTES = int(os.getenv('INLINE_UPLOAD_MAX_BYTES', str(1024 * 1024)))
    IMAGE_MAX_BYTES = int(os.getenv('IMAGE_MAX_BYTES', str(2 * 1024 * 1024)))

    # Dashboard behaviour
    NOTICE_TTL_SECONDS = 3
    REALTIME_QUEUE_SIZE = 100
    REALTIME_KEEPALIVE_SECONDS = 15

    # Logging Configuration
    LOGGING = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'standard'
            }
        },
        'root': {
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'handlers': ['console']
        }
    }

    # Session Configuration
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    ADMIN_EMAIL = 'admin@example.com'
    ADMIN_PASSWORD_HASH = None
    ADMIN_PASSWORD = 'correct horse battery staple'
    STORAGE_URL = 'http://storage.test'
    STORAGE_API_KEY = 'test-key'
    INLINE_UPLOAD_MAX_BYTES = 1024
    IMAGE_MAX_BYTES = 8192
    REALTIME_KEEPALIVE_SECONDS = 1
