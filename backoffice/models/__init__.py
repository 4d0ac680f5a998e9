from .admin import AdminUser
from .blog import Blog
from .course import Course
from .lecturer import Lecturer
from .offered_course import OfferedCourse
from .user_form import UserFormSubmission

__all__ = ['AdminUser', 'Blog', 'Course', 'Lecturer', 'OfferedCourse', 'UserFormSubmission']
