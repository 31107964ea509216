"""
Remove tasks whose project no longer exists.

Deleting a project removes its tasks and the project in two separate commits.
Run this after a failed project deletion (or periodically) to clean up.
"""
import sys
import os
from sqlmodel import Session

# Add current directory to path
sys.path.append(os.getcwd())

from app.core.logging import setup_logging
from app.db.session import engine
from app.services.projects import sweep_orphan_tasks

def sweep():
    print("--- Orphaned Task Sweep ---")
    with Session(engine) as session:
        removed = sweep_orphan_tasks(session)
    print(f"Removed {removed} orphaned task(s).")

if __name__ == "__main__":
    setup_logging()
    sweep()
