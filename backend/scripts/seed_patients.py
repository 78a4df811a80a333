"""
Add the sample patients to an account, registering it if needed.
Run with: python -m scripts.seed_patients --username demo --password demo
Run with: python -m scripts.seed_patients --username demo --password demo --force  (add even if the account has records)
"""

import argparse
from medflow.config import get_settings
from medflow.database import create_db_engine, create_session_factory, init_db
from medflow.exceptions import AuthenticationFailed, DuplicateUsername
from medflow.main import build_contexts
from medflow.services.sample_data import SAMPLE_PATIENTS


def seed(username: str, password: str, force: bool = False) -> int:
    """Return the number of sample patients added."""
    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    session, patients = build_contexts(create_session_factory(engine), settings)

    try:
        try:
            session.login(username, password)
            print(f"Logged in as {username}.")
        except AuthenticationFailed:
            try:
                session.register(username, password)
            except DuplicateUsername:
                print(f"Account {username} exists but the password is wrong. Nothing was added.")
                return 0
            print(f"Registered new account {username}.")

        existing = len(patients.state.patients)
        if existing and not force:
            print(f"Account already has {existing} patients. Skipping sample data.")
            return 0

        state = patients.import_patients(SAMPLE_PATIENTS)
        print(f"Added {len(SAMPLE_PATIENTS)} sample patients ({len(state.patients)} total).")
        return len(SAMPLE_PATIENTS)
    finally:
        engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed sample patient records for an account")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument(
        "--force",
        action="store_true",
        help="Add the samples even if the account already has patients",
    )
    args = parser.parse_args()

    seed(args.username, args.password, force=args.force)
