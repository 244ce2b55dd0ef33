# Rate limiting configuration for the task board
# Использует slowapi для защиты API от абуза

from slowapi import Limiter
from slowapi.util import get_remote_address

# Лимитер по IP адресу клиента
limiter = Limiter(key_func=get_remote_address)

# Clients poll the board every few seconds, so reads get a wide budget
RATE_LIMITS = {
    "project_operations": "30/minute",
    "board_writes": "120/minute",
    "task_writes": "120/minute",
    "read_operations": "300/minute",
}

__all__ = ["limiter", "RATE_LIMITS"]
