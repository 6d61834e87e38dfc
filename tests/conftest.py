"""Test environment: in-memory database, fast bcrypt, fixed signing secret. Runs before taskmanager is imported."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-for-unit-tests-only-0123456789"
os.environ["JWT_ISSUER"] = "TaskManagerAPI"
os.environ["JWT_AUDIENCE"] = "TaskManagerApp"
os.environ["JWT_EXPIRE_MINUTES"] = "10080"
