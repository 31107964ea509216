import sys
import os
from sqlmodel import Session, select

# Add current directory to path so we can import app
sys.path.append(os.getcwd())

from app.db.session import engine, init_db
from app.models import User

def verify_database():
    print("--- Database Verification ---")
    try:
        # This will create tables if they don't exist
        print("Attempting to create tables...")
        init_db()
        print("Table creation/verification successful.")

        # Test session and a simple query
        with Session(engine) as session:
            statement = select(User).limit(1)
            session.exec(statement).first()
            print("Database connection test: SUCCESS")

    except Exception as e:
        print("Database connection test: FAILED")
        print(f"Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    verify_database()
