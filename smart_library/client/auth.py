from loguru import logger

USER = 'user'
ADMIN = 'admin'


class AuthSession:
    """Logs a member or an admin in and keeps the token in the client's store"""

    def __init__(self, api):
        self.api = api

    @property
    def token_store(self):
        return self.api.token_store

    @property
    def is_authenticated(self):
        return bool(self.token_store.token)

    @property
    def is_admin(self):
        return self.is_authenticated and self.token_store.user_type == ADMIN

    def login(self, identifier, password):
        data = self.api.login(identifier, password)
        self.token_store.save(data['token'], USER)
        logger.info('Signed in as member {}', identifier)
        return data['user']

    def signup(self, user_data):
        data = self.api.signup(user_data)
        if data.get('token'):
            self.token_store.save(data['token'], USER)
        return data.get('user')

    def admin_login(self, email, password):
        data = self.api.admin_login(email, password)
        self.token_store.save(data['token'], ADMIN)
        logger.info('Signed in as admin {}', email)
        return data['admin']

    def impersonate(self, user_id):
        """Swap the admin token for one acting as the member; returns the session details"""
        data = self.api.impersonate_user(user_id)
        self.token_store.save(data['impersonation_token'], USER)
        return data

    def logout(self):
        self.token_store.clear()
