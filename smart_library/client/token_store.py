import json
from pathlib import Path

from loguru import logger

TOKEN_KEY = 'token'
USER_TYPE_KEY = 'userType'


class TokenStore:
    """
    Credentials the client sends with every request.

    Keeps `token` and `userType` in memory, and in a JSON file when a path is
    given so a session survives restarts.
    """

    def __init__(self, path=None):
        self.path = Path(path) if path else None
        self._values = {}
        if self.path and self.path.exists():
            try:
                self._values = json.loads(self.path.read_text(encoding='utf-8') or '{}')
            except ValueError:
                logger.warning('Ignoring unreadable token store {}', self.path)
                self._values = {}

    @property
    def token(self):
        return self._values.get(TOKEN_KEY)

    @property
    def user_type(self):
        return self._values.get(USER_TYPE_KEY)

    def get(self, key):
        return self._values.get(key)

    def set(self, key, value):
        self._values[key] = value
        self._flush()

    def remove(self, key):
        self._values.pop(key, None)
        self._flush()

    def save(self, token, user_type='user'):
        self._values[TOKEN_KEY] = token
        self._values[USER_TYPE_KEY] = user_type
        self._flush()

    def clear(self):
        """Forget the token and the user type"""
        self._values.pop(TOKEN_KEY, None)
        self._values.pop(USER_TYPE_KEY, None)
        self._flush()

    def _flush(self):
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2), encoding='utf-8')
