from flask_login import UserMixin
from .. import login_manager

ADMIN_ID = 'admin'

@login_manager.user_loader
def load_user(user_id):
    if user_id == ADMIN_ID:
        return AdminUser()
    return None

class AdminUser(UserMixin):
    """The single back-office account; it has no table of its own"""

    id = ADMIN_ID

    def get_id(self):
        return self.id

    def __repr__(self):
        return '<AdminUser>'
