import os
os.environ["TESTING"] = "1"
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
import pytest
import jwt
from fastapi.testclient import TestClient

import sys
from pathlib import Path

import uuid

sys.path.append(str(Path(__file__).resolve().parents[2]))

from brigadas.main import app
from brigadas.database import Base, SessionLocal, engine
from brigadas import models

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)

CATALOG = ("Brújula", "GPS", "Machete")


@pytest.fixture(autouse=True)
def equipment_catalog():
    """Reset the global equipment catalog to a known set for every test."""
    db = SessionLocal()
    try:
        db.query(models.EquipmentCatalogItem).delete()
        db.add_all(models.EquipmentCatalogItem(nombre=name) for name in CATALOG)
        db.commit()
    finally:
        db.close()
    yield CATALOG


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def make_token(*, sub: str, email: str, audience: str = "authenticated", **claims) -> str:
    payload = {"sub": sub, "email": email, "aud": audience, **claims}
    return jwt.encode(payload, os.environ["AUTH_JWT_SECRET"], algorithm="HS256")


def create_user(*, email: str | None = None, rol: str = "brigadista") -> models.User:
    db = SessionLocal()
    try:
        user = models.User(email=email or f"user-{uuid.uuid4()}@example.com", rol=rol)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    finally:
        db.close()


def ensure_auth_headers(*, admin: bool = False):
    """
    purpose: register a usuarios row and return bearer headers for it
    outputs: tuple(headers dict, User)
    """

    user = create_user(rol="admin" if admin else "brigadista")
    token = make_token(sub=str(user.id), email=user.email)
    return {"Authorization": f"Bearer {token}"}, user


@pytest.fixture
def admin_headers():
    headers, _ = ensure_auth_headers(admin=True)
    return headers


@pytest.fixture
def brigade(client, admin_headers):
    resp = client.post("/api/brigadas/", json={"nombre": f"Brigada {uuid.uuid4().hex[:6]}"}, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()
