"""
Blueprint registration for GovLead Academy.

Every blueprint carries its own /api URL prefix.
"""

from __future__ import annotations


def register_blueprints(app):
    from blueprints.core import bp as core_bp
    from blueprints.learning import bp as learning_bp
    from blueprints.account import bp as account_bp
    from blueprints.admin import bp as admin_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(learning_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(admin_bp)
