"""Administration CLI."""

import pytest
from click.testing import CliRunner

from paratransit import cli as cli_module
from paratransit.core.security import verify_password
from paratransit.db.models import Organization, User
from paratransit.db.session import SessionLocal
from paratransit.services import permission_service


class SharedDatabaseRegistry:
    """Every org resolves to the shared in-memory test database."""

    def session(self, subdomain: str):
        return SessionLocal()


@pytest.fixture
def runner(monkeypatch) -> CliRunner:
    monkeypatch.setattr(cli_module, "org_registry", SharedDatabaseRegistry())
    monkeypatch.setattr(cli_module, "provision_org_database", lambda subdomain: None)
    return CliRunner()


def test_create_org_with_admin(runner):
    result = runner.invoke(cli_module.cli, [
        "create-org",
        "--name", "Valley Rides",
        "--subdomain", "Valley",
        "--poc-email", "info@valley.org",
        "--admin-email", "Boss@Valley.org",
        "--admin-password", "s3cret-pass",
    ])

    assert result.exit_code == 0, result.output
    assert "✓ Created organization: Valley Rides" in result.output

    session = SessionLocal()
    try:
        admin = session.query(User).filter(User.email == "boss@valley.org").one()
        assert admin.role.role_key == "admin"
        assert verify_password("s3cret-pass", admin.password_hash)
        assert permission_service.get_role_by_key(session, "driver") is not None
    finally:
        session.close()


def test_create_org_rejects_duplicates_and_bad_subdomains(runner, test_org):
    base = ["create-org", "--name", "X", "--poc-email", "x@x.org", "--admin-email", "a@x.org"]

    result = runner.invoke(cli_module.cli, base + ["--subdomain", "testorg"])
    assert result.exit_code == 1
    assert "already taken" in result.output

    result = runner.invoke(cli_module.cli, base + ["--subdomain", "bad_name"])
    assert result.exit_code == 1
    assert "Invalid organization" in result.output


def test_create_org_rejects_overlong_password_before_provisioning(runner):
    result = runner.invoke(cli_module.cli, [
        "create-org", "--name", "Hill Rides", "--subdomain", "hill",
        "--poc-email", "x@hill.org", "--admin-email", "a@hill.org",
        "--admin-password", "p" * 80,
    ])

    assert result.exit_code == 1
    assert "at most 72 bytes" in result.output
    session = SessionLocal()
    try:
        assert session.query(Organization).filter(Organization.subdomain == "hill").count() == 0
    finally:
        session.close()


def test_seed_permissions_unknown_org(runner):
    result = runner.invoke(cli_module.cli, ["seed-permissions", "--org", "nowhere"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_seed_permissions_all_orgs(runner, test_org):
    result = runner.invoke(cli_module.cli, ["seed-permissions"])

    assert result.exit_code == 0
    assert "✓ Seeded testorg" in result.output


def test_revoke_sessions_bumps_token_version(runner, org_db, driver_user):
    before = driver_user.token_version

    result = runner.invoke(cli_module.cli, [
        "revoke-sessions", "--org", "testorg", "--email", "Driver@Test.com",
    ])

    assert result.exit_code == 0, result.output
    org_db.expire_all()
    assert org_db.get(User, driver_user.id).token_version == before + 1


def test_send_digests_dry_run(runner, test_org):
    result = runner.invoke(cli_module.cli, ["send-digests", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Organizations checked:   1" in result.output
