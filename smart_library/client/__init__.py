from smart_library.client.api import ApiClient, ApiError
from smart_library.client.auth import AuthSession
from smart_library.client.checkout import Checkout, InsufficientWalletBalance
from smart_library.client.poller import UnreadCountPoller
from smart_library.client.resources import ResourceManager
from smart_library.client.token_store import TokenStore
from smart_library.utils.pricing import calculate_expected_refund

__all__ = [
    'ApiClient',
    'ApiError',
    'AuthSession',
    'Checkout',
    'InsufficientWalletBalance',
    'UnreadCountPoller',
    'ResourceManager',
    'TokenStore',
    'calculate_expected_refund',
]
