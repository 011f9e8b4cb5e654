# Utility modules
from .ip import derive, is_valid_ip, parse_ip

__all__ = ["derive", "is_valid_ip", "parse_ip"]
