"""
Environment construction for the assumed role
"""

import shlex

CREDENTIAL_VARIABLES = (
    ('AWS_ACCESS_KEY_ID', 'access_key_id'),
    ('AWS_SECRET_ACCESS_KEY', 'secret_access_key'),
    ('AWS_SESSION_TOKEN', 'session_token'),
)


def capture_host_environment(environ, defaults=None):
    """Snapshot the inherited environment, letting defaults fill only the gaps"""
    snapshot = {key: str(value) for key, value in environ.items()}
    for key, value in (defaults or {}).items():
        snapshot.setdefault(key, str(value))
    return snapshot


def credential_variables(credentials):
    return {name: getattr(credentials, attr) for name, attr in CREDENTIAL_VARIABLES}


def build_exec_env(base, credentials):
    env = dict(base)
    env.update(credential_variables(credentials))
    return env


def build_export_text(credentials):
    return '\n'.join(
        f'export {name}={shlex.quote(value)}'
        for name, value in credential_variables(credentials).items()
    )
