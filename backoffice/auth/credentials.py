import hmac
import logging

from werkzeug.security import generate_password_hash, check_password_hash

logger = logging.getLogger(__name__)


class CredentialVerifier:
    """Decides whether an email/password pair may open the back office"""

    def verify(self, email, password):
        raise NotImplementedError


class StaticCredentialVerifier(CredentialVerifier):
    """One configured admin account, password kept only as a hash"""

    def __init__(self, email, password_hash):
        self.email = email
        self.password_hash = password_hash

    @classmethod
    def from_config(cls, config):
        password_hash = config.get('ADMIN_PASSWORD_HASH')
        if not password_hash:
            password = config.get('ADMIN_PASSWORD')
            if not password:
                logger.warning("No ADMIN_PASSWORD_HASH or ADMIN_PASSWORD configured; login is disabled")
                return cls(config.get('ADMIN_EMAIL'), None)
            password_hash = generate_password_hash(password)
        return cls(config.get('ADMIN_EMAIL'), password_hash)

    def verify(self, email, password):
        if not email or not password or not self.email or not self.password_hash:
            return False
        # Both checks always run so timing does not reveal which field was wrong
        email_ok = hmac.compare_digest(email.encode('utf-8'), self.email.encode('utf-8'))
        password_ok = check_password_hash(self.password_hash, password)
        return email_ok and password_ok
