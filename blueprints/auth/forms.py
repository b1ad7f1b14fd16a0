"""
Authentication forms using Flask-WTF.
Login form with CSRF protection; accepts form posts and JSON bodies.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired


class LoginForm(FlaskForm):
    """Login form with username and password."""

    username = StringField('Utente', validators=[
        DataRequired(message="L'utente è obbligatorio")
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='La password è obbligatoria')
    ])

    remember_me = BooleanField('Ricordami')
