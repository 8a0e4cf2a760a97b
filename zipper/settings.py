import os
import json
import logging
import logging.config

from zipper.core.logging import TOKEN_PATTERN, DEFAULT_MASK


class SettingsDict(dict):
    """Allow overriding on-disk config via environment variables.  Normal config is done with a
    hierarchical dict::

        "REDIS_CONFIG": {
          "HOST": "localhost"
        }

    ``HOST`` can be retrieved in the python code with::

        config = SettingsDict(json.load('local-config.json'))
        redis_cfg = config.child('REDIS_CONFIG')
        host = redis_cfg.get('HOST')

    To override a value, join all of the parent keys and the child keys with an underscore::

        $ REDIS_CONFIG_HOST='redis.internal' invoke server

    Nested dicts can be handled with the ``.child()`` method.
    """

    def __init__(self, *args, parent=None, **kwargs):
        self.parent = parent
        super().__init__(*args, **kwargs)

    def get(self, key, default=None):
        """Fetch a config value for ``key`` from the settings.  First checks the env, then the
        on-disk config.  If neither exists, returns ``default``."""
        env = self.full_key(key)
        if env in os.environ:
            return os.environ.get(env)
        return super().get(key, default)

    def get_bool(self, key, default=None):
        """Fetch a config value and interpret as a bool. Since envvars are always strings,
        interpret '0' and the empty string as False and '1' as True.  Anything else is probably
        an accident, so die screaming."""
        value = self.get(key, default)
        if value in [False, 0, '0', '']:
            retval = False
        elif value in [True, 1, '1']:
            retval = True
        else:
            raise Exception(
                '{} should be a truthy value, but instead we got {}'.format(
                    self.full_key(key), value
                )
            )
        return retval

    def get_nullable(self, key, default=None):
        """Fetch a config value and interpret the empty string as None. Useful for external code
        that expects an explicit None."""
        value = self.get(key, default)
        return None if value == '' else value

    def full_key(self, key):
        """The name of the envvar which corresponds to this key."""
        return '{}_{}'.format(self.parent, key) if self.parent else key

    def child(self, key):
        """Fetch a sub-dict of the current dict."""
        return SettingsDict(self.get(key, {}), parent=self.full_key(key))


PROJECT_NAME = 'zipper'
PROJECT_CONFIG_PATH = '~/.cos'

DEFAULT_FORMATTER = {
    '()': 'zipper.core.logging.MaskFormatter',
    'fmt': '%(cyan)s[%(asctime)s]%(log_color)s[%(levelname)s][%(name)s]: %(reset)s%(message)s',
    'pattern': TOKEN_PATTERN,
    'mask': DEFAULT_MASK,
}
DEFAULT_LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'console': DEFAULT_FORMATTER,
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'console'
        },
    },
    'root': {
        'level': 'INFO',
        'handlers': ['console']
    }
}


try:
    config_path = os.environ['{}_CONFIG'.format(PROJECT_NAME.upper())]
except KeyError:
    env = os.environ.get('ENV', 'test')
    config_path = '{}/{}-{}.json'.format(PROJECT_CONFIG_PATH, PROJECT_NAME, env)


config = SettingsDict()
config_path = os.path.expanduser(config_path)
if not os.path.exists(config_path):
    logging.warning('No \'{}\' configuration file found'.format(config_path))
else:
    with open(config_path) as fp:
        config = SettingsDict(json.load(fp))


def child(key):
    return config.child(key)


DEBUG = config.get_bool('DEBUG', True)

logging_config = config.get('LOGGING', DEFAULT_LOGGING_CONFIG)
logging.config.dictConfig(logging_config)

SENTRY_DSN = config.get_nullable('SENTRY_DSN', None)
