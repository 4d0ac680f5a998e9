from ..models import Blog, Course, Lecturer, OfferedCourse, UserFormSubmission
from .base import Resource, ResourceSchema

blogs = Resource(ResourceSchema(
    Blog,
    slug='blogs',
    label='Blog',
    fields=('title', 'text', 'image', 'image_file_path', 'image_file_name', 'tags'),
    required=('title',),
    array_fields=('tags',),
    search_fields=('title', 'text'),
    search_list_fields=('tags',),
    partial_update=True,
))

courses = Resource(ResourceSchema(
    Course,
    slug='courses',
    label='Course',
    fields=(
        'title', 'course_details', 'image', 'courseIcon', 'start_course',
        'quantity_lessons', 'quantity_of_students', 'lesson_time', 'lecturer',
        'lecturer_details', 'price', 'oldprice', 'syllabus_title', 'syllabus_content',
    ),
    required=('title',),
    array_fields=('course_details', 'syllabus_title'),
    container_fields={'syllabus_content': list},
    numeric_fields={'quantity_lessons': int, 'lesson_time': int, 'price': float, 'oldprice': float},
    search_fields=('title',),
    search_list_fields=('course_details',),
    partial_update=True,
))

offered_courses = Resource(ResourceSchema(
    OfferedCourse,
    slug='offered-courses',
    label='Offered course',
    fields=(
        'title', 'text', 'image', 'courseIcon', 'lecturers', 'lecturers_details',
        'course_details', 'course_category', 'quantity_of_lessons',
        'quantity_of_students', 'price', 'old_price', 'discount_percentage',
        'syllabus_title', 'syllabus_content',
    ),
    required=('title',),
    array_fields=('lecturers', 'lecturers_details', 'course_details', 'syllabus_title', 'course_category'),
    container_fields={'syllabus_content': dict},
    numeric_fields={'price': float, 'old_price': float},
    search_fields=('title', 'text'),
    search_list_fields=('course_category',),
))

lecturers = Resource(ResourceSchema(
    Lecturer,
    slug='lecturers',
    label='Lecturer',
    fields=('fullName', 'field', 'lecturer_text', 'lecturer_image'),
    required=('fullName',),
    search_fields=('fullName', 'field', 'lecturer_text'),
    date_fields=('created_at', 'updated_at'),
))

user_forms = Resource(ResourceSchema(
    UserFormSubmission,
    slug='users-form',
    label='Submission',
    fields=(
        'email', 'firstName', 'lastName', 'phoneNumber', 'socialId',
        'birth_date', 'choosedCourse', 'choosedMedia',
    ),
    search_fields=('email', 'firstName', 'lastName', 'choosedCourse'),
    date_fields=('created_at', 'birth_date'),
))

RESOURCES = {resource.schema.slug: resource for resource in
             (blogs, courses, offered_courses, lecturers, user_forms)}

BY_TABLE = {resource.table: resource for resource in RESOURCES.values()}


def get_resource(slug):
    return RESOURCES.get(slug)
