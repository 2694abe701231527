# utils/client.py
from flask import request


def get_client_address():
    """
    Socket address of the client.

    Forwarded headers are only honoured through ProxyFix, which the application
    factory installs when TRUSTED_PROXY_COUNT is set.
    """
    return request.remote_addr or '127.0.0.1'


def get_user_agent():
    return request.headers.get('User-Agent', '')
