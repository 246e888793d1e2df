# Core package for configuration, logging and request plumbing

from .config import settings
from .logging import setup_logging, get_logger
from .exceptions import setup_exception_handlers, APIException, AIServiceException
from .middleware import setup_middleware
from .rate_limiting import rate_limiter, check_rate_limit
