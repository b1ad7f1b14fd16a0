"""
Authentication routes: login, logout, current user.
JSON endpoints backing the planner's session handling.
"""

from flask import Blueprint, current_app
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from blueprints.auth.forms import LoginForm
from models.user import User, get_user_by_username, update_last_login, check_password
from utils.api_response import api_success, api_error
from utils.messages import MESSAGES

auth_bp = Blueprint('auth', __name__)


def _user_payload(user) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'full_name': user.full_name,
        'role': user.role,
        'is_admin': user.is_admin,
    }


@auth_bp.route('/login', methods=['GET'])
def login_token():
    """CSRF token for the login post (the planner fetches it first)."""
    return api_success(data={'csrf_token': generate_csrf()})


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Log a user in.

    Request body (JSON or form):
        username, password, remember_me (optional)
    """
    form = LoginForm()

    if not form.validate_on_submit():
        errors = [msg for field_errors in form.errors.values() for msg in field_errors]
        return api_error(errors[0] if errors else MESSAGES['data_required'], 400)

    user_dict = get_user_by_username(form.username.data)

    if user_dict is None or not check_password(user_dict, form.password.data):
        current_app.logger.info(f'Failed login for {form.username.data!r}')
        return api_error(MESSAGES['invalid_credentials'], 401)

    if not user_dict.get('active'):
        return api_error(MESSAGES['account_disabled'], 403)

    user = User(user_dict)
    login_user(user, remember=form.remember_me.data)
    update_last_login(user.id)

    return api_success(
        data=_user_payload(user),
        message=MESSAGES['login_success'].format(name=user.full_name or user.username),
        csrf_token=generate_csrf()
    )


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/me')
@login_required
def me():
    """Current actor."""
    return api_success(data=_user_payload(current_user), csrf_token=generate_csrf())
