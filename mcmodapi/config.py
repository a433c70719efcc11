import os

from dotenv import load_dotenv


DEFAULTS = {
    'BASE_URL': 'https://www.mcmod.cn',
    'USER_AGENT': 'Mozilla/5.0',
    'FETCH_TIMEOUT': 30,
    'CACHE_MAX_AGE': 3600,
    'PAGE_SIZE': 30,
    'LOG_DIR': '',
    'DEBUG': False,
    'RATE_LIMIT': '5 per second',
    'RATELIMIT_ENABLED': True,
    'RATELIMIT_STORAGE_URI': 'memory://',
}


ENV_KEYS = {
    'BASE_URL': 'MCMOD_BASE_URL',
    'USER_AGENT': 'MCMOD_USER_AGENT',
    'FETCH_TIMEOUT': 'MCMOD_FETCH_TIMEOUT',
    'CACHE_MAX_AGE': 'MCMOD_CACHE_MAX_AGE',
    'LOG_DIR': 'MCMOD_LOG_DIR',
    'DEBUG': 'DEBUG',
    'RATE_LIMIT': 'MCMOD_RATELIMIT',
    'RATELIMIT_ENABLED': 'MCMOD_RATELIMIT_ENABLED',
}


def _coerce(key, raw):
    default = DEFAULTS[key]
    if isinstance(default, bool):
        return raw.strip().lower() in ('1', 'true', 'yes', 'on')
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return default
    return raw


def load_config(overrides=None):
    load_dotenv()

    config = dict(DEFAULTS)
    for key, env_name in ENV_KEYS.items():
        raw = os.environ.get(env_name)
        if raw is not None and raw != '':
            config[key] = _coerce(key, raw)

    if overrides:
        config.update(overrides)

    config['BASE_URL'] = config['BASE_URL'].rstrip('/')
    return config
