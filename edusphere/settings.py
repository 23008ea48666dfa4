import os

from tasks.config import TASK_CONFIG

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))



SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY", "dev-only-2v#r9^m1x@k0q!e5t7w3u8z$c6b4n(a)j_h%l+d"
)


DEBUG = os.environ.get("DJANGO_DEBUG", "True").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "").split(",")
    if host.strip()
]


# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "apps.corecode",
    "apps.students",
    "apps.staffs",
    "apps.finance",
    "apps.admissions",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "apps.corecode.middleware.SiteWideConfigs",
]

ROOT_URLCONF = "edusphere.urls"

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

WSGI_APPLICATION = "edusphere.wsgi.application"


# Database
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DJANGO_DB_NAME", os.path.join(BASE_DIR, "db.sqlite3")),
    }
}


# Password validation
# https://docs.djangoproject.com/en/4.2/ref/settings/#auth-password-validators

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]


# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = "en-us"

TIME_ZONE = "UTC"

USE_I18N = True

USE_TZ = True


# Static files (CSS, JavaScript, Images)
# https://docs.djangoproject.com/en/4.2/howto/static-files/

DATA_UPLOAD_MAX_NUMBER_FIELDS = 10240

STATIC_URL = "/static/"

STATIC_ROOT = os.path.join(BASE_DIR, "staticfiles")

MEDIA_ROOT = os.path.join(BASE_DIR, "media")

MEDIA_URL = "/media/"

LOGOUT_REDIRECT_URL = "corecode:login"
LOGIN_REDIRECT_URL = "corecode:dashboard"
LOGIN_URL = "corecode:login"

AUTHENTICATION_BACKENDS = [
    "django.contrib.auth.backends.ModelBackend",
]

SESSION_SAVE_EVERY_REQUEST = True

SESSION_EXPIRE_AT_BROWSER_CLOSE = True

SESSION_COOKIE_AGE = 10800


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
        "file": {
            "level": "INFO",
            "class": "logging.handlers.TimedRotatingFileHandler",
            "when": "W6",
            "interval": 4,
            "backupCount": 3,
            "encoding": "utf8",
            "delay": True,
            "filename": os.environ.get("DJANGO_LOG_FILE", os.path.join(BASE_DIR, "debug.log")),
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["file"],
            "level": "INFO",
            "propagate": True,
        },
        "apps": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
        "tasks": {
            "handlers": ["console", "file"],
            "level": "INFO",
            "propagate": False,
        },
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.AutoField"


# Celery
CELERY_BROKER_URL = TASK_CONFIG["BROKER_URL"]
CELERY_RESULT_BACKEND = TASK_CONFIG["RESULT_BACKEND"]
CELERY_TASK_TRACK_STARTED = TASK_CONFIG["TASK_TRACK_STARTED"]
CELERY_TASK_TIME_LIMIT = TASK_CONFIG["TASK_TIME_LIMIT"]
CELERY_WORKER_CONCURRENCY = TASK_CONFIG["WORKER_CONCURRENCY"]
CELERY_TASK_SERIALIZER = TASK_CONFIG["TASK_SERIALIZER"]
CELERY_RESULT_SERIALIZER = TASK_CONFIG["RESULT_SERIALIZER"]
CELERY_ACCEPT_CONTENT = TASK_CONFIG["ACCEPT_CONTENT"]
CELERY_TIMEZONE = TASK_CONFIG["TIMEZONE"]

# When False, background jobs run inline in the request.
TASKS_USE_CELERY = TASK_CONFIG["USE_CELERY"]


# Site Default values
SCHOOL_NAME = os.environ.get("SCHOOL_NAME", "EduSphere School")
CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "₹")

# Profile photo limits
IMAGE_MAX_DIMENSION = 1000
IMAGE_TARGET_BYTES = 150 * 1024
