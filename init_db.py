from backoffice import create_app, db
from backoffice.models import Blog, Course, Lecturer, OfferedCourse, UserFormSubmission

app = create_app()

with app.app_context():
    # Drop all tables
    db.drop_all()
    
    # Create all tables
    db.create_all()
    
    print("Database initialized successfully!")
