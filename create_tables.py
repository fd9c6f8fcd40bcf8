"""
Database setup script
Creates every table of the exam portal schema
"""

from dotenv import load_dotenv
load_dotenv()

from database.database import engine, Base
from database.models import User, Exam, Quiz, Question, Result, ResultAnswer, Notification  # noqa: F401


def create_tables():
    """Create all tables in the database"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully!")
    print("\nCreated tables:")
    print("  - users")
    print("  - exams, quizzes, questions")
    print("  - results, result_answers")
    print("  - notifications")


if __name__ == "__main__":
    create_tables()
