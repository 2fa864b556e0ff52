"""
Django settings for Outreach.

Secrets come from the environment - never hardcode credentials.
Run with: uv run python apps/web/manage.py runserver
"""

from pathlib import Path

import environ  # type: ignore[import-untyped]

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Initialize environ
env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, []),
    LOG_LEVEL=(str, "INFO"),
    CALENDLY_SIGNING_KEY=(str, ""),
    CALENDLY_WEBHOOK_CALLBACK_URL=(str, ""),
    CALENDLY_SIGNATURE_TOLERANCE_SECONDS=(int, 180),
    CALENDLY_TIMEOUT_SECONDS=(float, 15.0),
    SLACK_BOT_TOKEN=(str, ""),
    CLIENT_PORTAL_URL=(str, "http://localhost:8000/dashboard/"),
    NOTIFICATION_TIMEOUT_SECONDS=(float, 10.0),
    DASHBOARD_STATS_DAYS=(int, 30),
)

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Local apps
    "apps.web.core",
    "apps.web.integrations",
    "apps.web.bookings",
    "apps.web.notifications",
    "apps.web.dashboard",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware
    "apps.web.core.middleware.ClientMiddleware",
]

ROOT_URLCONF = "apps.web.config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "apps.web.config.wsgi.application"

# Database
# https://docs.djangoproject.com/en/5.1/ref/settings/#databases
# Connection string from the environment: DATABASE_URL
DATABASES = {
    "default": env.db("DATABASE_URL"),
}

# Password validation
_V = "django.contrib.auth.password_validation"
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": f"{_V}.UserAttributeSimilarityValidator"},
    {"NAME": f"{_V}.MinimumLengthValidator"},
    {"NAME": f"{_V}.CommonPasswordValidator"},
    {"NAME": f"{_V}.NumericPasswordValidator"},
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR.parent.parent / "staticfiles"  # /app/staticfiles in production

# Uploaded artifacts (booking PDFs)
MEDIA_URL = env("MEDIA_URL", default="/media/")
MEDIA_ROOT = env("MEDIA_ROOT", default=str(BASE_DIR.parent.parent / "media"))

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# Scheduling provider (Calendly)
# =============================================================================

CALENDLY_API_URL = env("CALENDLY_API_URL", default="https://api.calendly.com")
CALENDLY_SIGNING_KEY = env("CALENDLY_SIGNING_KEY")
CALENDLY_WEBHOOK_CALLBACK_URL = env("CALENDLY_WEBHOOK_CALLBACK_URL")
CALENDLY_SIGNATURE_TOLERANCE_SECONDS = env("CALENDLY_SIGNATURE_TOLERANCE_SECONDS")
CALENDLY_TIMEOUT_SECONDS = env("CALENDLY_TIMEOUT_SECONDS")

# =============================================================================
# Notifications
# =============================================================================

SLACK_API_URL = env("SLACK_API_URL", default="https://slack.com/api")
SLACK_BOT_TOKEN = env("SLACK_BOT_TOKEN")
NOTIFICATION_TIMEOUT_SECONDS = env("NOTIFICATION_TIMEOUT_SECONDS")

# =============================================================================
# Client dashboard
# =============================================================================

CLIENT_PORTAL_URL = env("CLIENT_PORTAL_URL")
DASHBOARD_STATS_DAYS = env("DASHBOARD_STATS_DAYS")

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = env("LOG_LEVEL")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
