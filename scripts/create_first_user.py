import sys
import os
from sqlmodel import Session, select

# Add current directory to path
sys.path.append(os.getcwd())

from app.db.session import engine, init_db
from app.models.user import User
from app.core.security import get_password_hash

def create_initial_user():
    print("--- Initial User Creation ---")

    email = os.environ.get("FIRST_USER_EMAIL", "admin@example.com")
    password = os.environ.get("FIRST_USER_PASSWORD", "adminpassword")
    full_name = os.environ.get("FIRST_USER_NAME", "First User")

    init_db()

    with Session(engine) as session:
        # Check if user already exists
        statement = select(User).where(User.email == email)
        user = session.exec(statement).first()

        if user:
            print(f"User with email {email} already exists.")
            return

        print(f"Creating user {email}...")
        db_user = User(
            email=email,
            password=get_password_hash(password),
            full_name=full_name,
        )
        session.add(db_user)
        session.commit()
        print("Initial user created successfully!")
        print(f"Email: {email}")

if __name__ == "__main__":
    create_initial_user()
