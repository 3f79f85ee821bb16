from sortie.core.security import verify_password
from sortie.models.user import User
from sortie.seeds import create_super_admin


def test_creates_admin_once(db, session_factory, monkeypatch):
    monkeypatch.setattr(create_super_admin, "SessionLocal", session_factory)
    monkeypatch.setattr(create_super_admin, "init_db", lambda: None)

    created = create_super_admin.run("owner@example.com", "pw-123456")
    again = create_super_admin.run("owner@example.com", "other-password")

    assert created.id == again.id
    user = db.query(User).filter(User.email == "owner@example.com").one()
    assert user.role == "admin"
    assert verify_password("pw-123456", user.password_hash)
