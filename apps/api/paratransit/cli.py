"""CLI tools for paratransit administration."""

import click

from paratransit.core.security import hash_password
from paratransit.db.models import Organization, User
from paratransit.db.session import SessionLocal
from paratransit.db.tenancy import org_registry, provision_org_database


@click.group()
def cli():
    """Paratransit CLI tools."""
    pass


@cli.command()
@click.option("--name", required=True, help="Organization name")
@click.option("--subdomain", required=True, help="Subdomain (lowercase, also the database name)")
@click.option("--poc-email", required=True, help="Point-of-contact email")
@click.option("--admin-email", required=True, help="First administrator's email")
@click.option("--admin-first-name", default="Org", help="Administrator first name")
@click.option("--admin-last-name", default="Admin", help="Administrator last name")
@click.option("--admin-password", default=None, help="Optional initial password")
def create_org(
    name: str,
    subdomain: str,
    poc_email: str,
    admin_email: str,
    admin_first_name: str,
    admin_last_name: str,
    admin_password: str | None,
):
    """
    Register an organization, provision its database and create its admin.

    Example:
        python -m paratransit.cli create-org --name "Valley Rides" --subdomain valley \\
            --poc-email info@valley.org --admin-email admin@valley.org
    """
    from pydantic import ValidationError

    from paratransit.schemas.org import OrgCreate
    from paratransit.services import organization_service, permission_service
    from paratransit.services.errors import DuplicateError

    try:
        data = OrgCreate(name=name, subdomain=subdomain.lower().strip(), poc_email=poc_email)
    except ValidationError as e:
        click.echo(f"❌ Invalid organization: {e.errors()[0]['msg']}")
        raise SystemExit(1)

    try:
        password_hash = hash_password(admin_password) if admin_password else None
    except ValueError as e:
        click.echo(f"❌ {e}")
        raise SystemExit(1)

    db = SessionLocal()
    try:
        org = organization_service.create_organization(
            db, data, None, provision_org_database, org_registry.session
        )
    except DuplicateError as e:
        click.echo(f"❌ {e}")
        raise SystemExit(1)
    finally:
        db.close()
    click.echo(f"✓ Created organization: {org.name}")
    click.echo(f"  ID: {org.id}")
    click.echo(f"  Subdomain: {org.subdomain}")

    org_db = org_registry.session(org.subdomain)
    try:
        role = permission_service.get_role_by_key(org_db, "admin")
        admin = User(
            first_name=admin_first_name,
            last_name=admin_last_name,
            email=admin_email.lower().strip(),
            role_id=role.id if role else None,
            password_hash=password_hash,
        )
        org_db.add(admin)
        org_db.commit()
        click.echo(f"✓ Created admin user {admin.email} ({admin.id})")
    finally:
        org_db.close()


@cli.command()
@click.option("--org", "subdomain", default=None, help="Only this organization (default: all active)")
def seed_permissions(subdomain: str | None):
    """
    Insert missing permissions and default roles into org databases.

    Safe to re-run; existing role grants are left alone.
    """
    from paratransit.services import call_log_service, organization_service, permission_service

    db = SessionLocal()
    try:
        if subdomain:
            org = organization_service.get_by_subdomain(db, subdomain)
            if not org:
                click.echo(f"❌ Organization '{subdomain}' not found")
                raise SystemExit(1)
            orgs = [org]
        else:
            orgs = organization_service.list_active(db)
    finally:
        db.close()

    for org in orgs:
        org_db = org_registry.session(org.subdomain)
        try:
            permission_service.seed_org(org_db)
            call_log_service.seed_call_log_types(org_db)
            org_db.commit()
            click.echo(f"✓ Seeded {org.subdomain}")
        finally:
            org_db.close()


@cli.command()
@click.option("--dry-run", is_flag=True, help="Collect emails in memory instead of sending")
def send_digests(dry_run: bool):
    """Run the driver daily digest for every organization that is due."""
    from paratransit.services import digest_service
    from paratransit.services.email_sender import OutboxEmailSender, get_email_sender

    sender = OutboxEmailSender() if dry_run else get_email_sender()
    db = SessionLocal()
    try:
        result = digest_service.run_driver_digests(db, org_registry.session, sender)
    finally:
        db.close()

    click.echo(f"Organizations checked:   {result.orgs_checked}")
    click.echo(f"Organizations processed: {result.orgs_processed}")
    click.echo(f"Messages queued:         {result.messages_queued}")
    click.echo(f"Messages sent:           {result.messages_sent}")
    click.echo(f"Messages failed:         {result.messages_failed}")
    if dry_run:
        for email in sender.sent:
            click.echo(f"  → {email['to']}: {email['subject']}")


@cli.command()
@click.option("--org", "subdomain", required=True, help="Organization subdomain")
@click.option("--email", required=True, help="User email to revoke sessions for")
def revoke_sessions(subdomain: str, email: str):
    """
    Revoke all sessions for a user by incrementing token_version.

    Existing JWTs carrying the old token_version are rejected.
    """
    db = SessionLocal()
    try:
        org = db.query(Organization).filter(Organization.subdomain == subdomain).first()
    finally:
        db.close()
    if not org:
        click.echo(f"❌ Organization '{subdomain}' not found")
        raise SystemExit(1)

    org_db = org_registry.session(org.subdomain)
    try:
        user = org_db.query(User).filter(User.email == email.lower().strip()).first()
        if not user:
            click.echo(f"❌ User not found: {email}")
            raise SystemExit(1)
        old_version = user.token_version
        user.token_version += 1
        org_db.commit()
        click.echo(f"✓ Revoked sessions for {email}")
        click.echo(f"  Token version: {old_version} → {user.token_version}")
    finally:
        org_db.close()


if __name__ == "__main__":
    cli()
