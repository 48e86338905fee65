import json
import os
from copy import deepcopy

from .errors import ConfigError


DEFAULT_CONFIG_PATH = 'config.json'
REGISTRY_KINDS = ('sql', 'memory')

DEFAULTS = {
    'token': None,
    'db_path': './channels.db',
    'cmd_prefix': '!abs ',
    'registry': 'sql',
    'call_timeout': 10.0,
    'log_level': 'INFO',
    'default_game': None,
    'db': {
        'options': {},
    },
}

# Environment variable -> config key
ENV_OVERRIDES = {
    'DISCORD_TOKEN': 'token',
    'DB_PATH': 'db_path',
    'CMD_PREFIX': 'cmd_prefix',
    'REGISTRY': 'registry',
    'LOG_LEVEL': 'log_level',
    'CALL_TIMEOUT': 'call_timeout',
}


def _read_file(path, required):
    if not os.path.isfile(path):
        if required:
            raise ConfigError(f'Config file "{path}" not found.')

        return {}

    try:
        with open(path) as config_file:
            data = json.load(config_file)
    except (OSError, ValueError) as e:
        raise ConfigError(f'Could not read config file "{path}": {e}') from e

    if not isinstance(data, dict):
        raise ConfigError(f'Config file "{path}" must contain a JSON object.')

    return data


def load_config(path=None, environ=None):
    """
    Build the process configuration.

    Values come from the defaults, then the JSON config file, then the environment.

    Args:
        path (typing.Optional[str]): Config file to read. If omitted,
            "config.json" in the PWD is used when present.
        environ (typing.Optional[typing.Mapping[str, str]]): Environment to read overrides from.
            Defaults to :data:`os.environ`.

    Returns:
        dict: Configuration suitable for ``Configuration.from_dict``.

    Raises:
        departures.errors.ConfigError: Config file unreadable or a value is invalid.
    """
    environ = os.environ if environ is None else environ
    required = path is not None
    path = path or DEFAULT_CONFIG_PATH

    config = deepcopy(DEFAULTS)
    file_config = _read_file(path, required)
    db = file_config.pop('db', None) or {}
    if not isinstance(db, dict):
        raise ConfigError('"db" must be an object.')

    config.update(file_config)
    config['db'].update(db)

    for var, key in ENV_OVERRIDES.items():
        if environ.get(var):
            config[key] = environ[var]

    if not config['token']:
        raise ConfigError('No Discord token configured. Set "token" or DISCORD_TOKEN.')

    if config['registry'] not in REGISTRY_KINDS:
        raise ConfigError(
            f'Unknown registry "{config["registry"]}". Choose one of {", ".join(REGISTRY_KINDS)}.'
        )

    try:
        config['call_timeout'] = float(config['call_timeout'])
    except (TypeError, ValueError) as e:
        raise ConfigError(f'"{config["call_timeout"]}" is not a valid timeout.') from e

    if config['call_timeout'] <= 0:
        raise ConfigError('Timeout must be positive.')

    # An explicit connect string wins over db_path
    if not config['db'].get('connect_string'):
        config['db']['connect_string'] = f'sqlite:///{config["db_path"]}'

    if not isinstance(config['db']['options'], dict):
        raise ConfigError('"db.options" must be an object.')

    return config
