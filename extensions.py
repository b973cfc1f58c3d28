"""
Shared Flask extensions, created unbound and initialised in create_app().
"""

from __future__ import annotations

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager

limiter = Limiter(key_func=get_remote_address, default_limits=["600 per hour"])

login_manager = LoginManager()
