from typing import Optional

from fastapi import Request


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client IP address, honouring the headers set by proxies and load balancers.

    Args:
        request (Request): The incoming FastAPI request object.

    Returns:
        Optional[str]: The first X-Forwarded-For entry, else X-Real-IP, else the peer address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client is None:
        return None
    return request.client.host
