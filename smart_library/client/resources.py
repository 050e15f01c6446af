"""
Create/update/delete flow shared by the back-office list pages.

A page keeps its rows in `items`, submits a form as either an update (when a
row is being edited) or a create, and only deletes once the user confirms.
"""
from loguru import logger


def _always_confirm(message):
    return True


class ResourceManager:
    def __init__(self, api, base_path, collection_key=None, confirm=None):
        self.api = api
        self.base_path = '/' + base_path.strip('/')
        self.collection_key = collection_key
        self.confirm = confirm or _always_confirm
        self.items = []
        self.editing_id = None

    def fetch(self, params=None):
        data = self.api.get(self.base_path, params=params)
        if isinstance(data, dict):
            key = self.collection_key or next((k for k, v in data.items() if isinstance(v, list)), None)
            data = data.get(key, []) if key else []
        self.items = data or []
        return self.items

    def edit(self, item_id):
        self.editing_id = item_id

    def reset(self):
        self.editing_id = None

    def submit(self, data, editing_id=None):
        """PUT to the edited row when there is one, otherwise POST a new row"""
        editing_id = editing_id if editing_id is not None else self.editing_id
        if editing_id is not None:
            result = self.api.put(f'{self.base_path}/{editing_id}', data)
        else:
            result = self.api.post(self.base_path, data)
        self.reset()
        self.fetch()
        return result

    def delete(self, item_id, confirm=None):
        """Delete a row once the user agrees; returns False when they decline"""
        confirm = confirm or self.confirm
        if not confirm('Are you sure you want to delete this item?'):
            logger.debug('Delete of {}/{} cancelled', self.base_path, item_id)
            return False
        self.api.delete(f'{self.base_path}/{item_id}')
        self.fetch()
        return True
