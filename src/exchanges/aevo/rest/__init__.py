from .aevo_rest import AevoRestClient
from .error_handler import handle_aevo_error, ERROR_MAPPING

__all__ = ['AevoRestClient', 'handle_aevo_error', 'ERROR_MAPPING']
