from functools import wraps
from flask import current_app, request
from ..services.session_service import SessionService


def get_session_service() -> SessionService:
    return current_app.extensions['session_service']


def current_session():
    """Verified identity ``{"id", "role"}`` from the session cookie.

    Raises Unauthenticated when the cookie is missing, tampered with or
    carries an expired token, even though the cookie itself may still be
    alive.
    """
    token = request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])
    return get_session_service().verify(token)


def session_required(f):
    """Resolve the caller's identity and pass it as the first view argument"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        return f(current_session(), *args, **kwargs)
    return decorated_function


def set_session_cookie(response, token: str):
    config = current_app.config
    response.set_cookie(
        config['AUTH_COOKIE_NAME'],
        token,
        max_age=config['AUTH_COOKIE_MAX_AGE'],
        httponly=True,
        secure=config['AUTH_COOKIE_SECURE'],
        samesite='Lax',
    )
    return response


def clear_session_cookie(response):
    response.set_cookie(
        current_app.config['AUTH_COOKIE_NAME'],
        '',
        expires=0,
        httponly=True,
        samesite='Lax',
    )
    return response
