"""JWT access tokens"""
import logging
from datetime import datetime, timedelta, timezone
import jwt
from flask import current_app

logger = logging.getLogger(__name__)


def create_access_token(user):
    """Signed token carrying the member's id, name, email and role"""
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=current_app.config['JWT_EXPIRES_MINUTES'])
    payload = {
        'sub': str(user.id),
        'name': user.name,
        'email': user.email,
        'role': user.role_enum.value,
        'iss': current_app.config['JWT_ISSUER'],
        'aud': current_app.config['JWT_AUDIENCE'],
        'iat': now,
        'exp': expires_at,
    }
    token = jwt.encode(payload, current_app.config['JWT_SECRET_KEY'],
                       algorithm=current_app.config['JWT_ALGORITHM'])
    return token, expires_at


def decode_access_token(token):
    """Claims of a valid token, or ``None`` if it is expired, forged or malformed"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']],
            audience=current_app.config['JWT_AUDIENCE'],
            issuer=current_app.config['JWT_ISSUER'],
        )
    except jwt.ExpiredSignatureError:
        logger.info('Rejected expired access token')
    except jwt.InvalidTokenError as e:
        logger.warning('Rejected invalid access token: %s', e)
    return None
